"""
Infrastructure Layer - Persistence

Modules:
- database: SQLAlchemy models, connection management and repositories
"""
