"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are deterministic given their inputs (clocks are injected)

Design Decisions:
    - Functional core separated from imperative shell: validation, pagination,
      statistics and rate admission are testable without a database
"""
