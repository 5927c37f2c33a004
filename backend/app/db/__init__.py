"""Database Metadata — the SQLAlchemy declarative Base shared by all models.

Invariants:
    - Single async engine per process (initialized via init_db in infrastructure/)
    - All sessions are async (AsyncSession)
"""
