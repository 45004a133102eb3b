"""Database Infrastructure — declarative base and standalone session factory.

Invariants:
    - All sessions are async (AsyncSession)
    - asyncpg driver for PostgreSQL, aiosqlite for tests
"""
