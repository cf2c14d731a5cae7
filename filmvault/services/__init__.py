"""Services Layer — catalog, account and purchase operations.

Invariants:
    - Services own the transaction: repositories flush, services commit
    - Cross-entity purchase rules live only in PurchaseWorkflow

Design Decisions:
    - One service per aggregate for locality (no god objects)
"""
