"""Diagnosis Records Package — REST service and data client for AI-suggested diagnoses.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
