"""Pydantic Schemas — request validation and response envelopes for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input); services re-check domain rules
    - Every response body is the {success, data?, message?, error?} envelope

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence (ADR: DDD boundary)
"""
