"""Pydantic Schemas — request/response validation for API endpoints and the data client.

Invariants:
    - Schemas validate at system boundary (user input, API responses)
    - Separate from models/: schemas are API contracts, models are persistence
"""
