"""Infrastructure Layer — database sessions, storage-error mapping and logging.

Invariants:
    - Infrastructure may raise core errors but never imports services/ or api/
    - Raw SQLAlchemy failures are classified in one place (error_taxonomy)

Design Decisions:
    - Session lifecycle separate from error mapping (ADR: single responsibility)
"""
