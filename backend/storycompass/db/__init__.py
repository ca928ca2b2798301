"""Database Declarations — the SQLAlchemy Base shared by every ORM model.

Invariants:
    - models/ registers tables on db.base.Base; nothing else defines metadata

Design Decisions:
    - asyncpg driver for PostgreSQL, aiosqlite for tests and local runs
"""
