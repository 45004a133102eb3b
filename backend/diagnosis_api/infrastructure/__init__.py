"""Infrastructure Layer — database session management and observability.

Invariants:
    - Infrastructure never imports from services/ or api/
"""
