"""Services — orchestration between routes and repositories.

Invariants:
    - Services receive their repository through the constructor
    - Services raise DiagnosisServiceError subclasses, never HTTPException
"""
