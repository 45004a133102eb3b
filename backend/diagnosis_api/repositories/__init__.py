"""Repositories — the only modules that issue SQL against the diagnoses table."""
