"""API Layer — FastAPI routers, dependencies, middleware and error handlers.

Invariants:
    - Routes never contain business logic (delegate to services)
    - Every error leaves through error_handlers, rendered from error_taxonomy.map_error
"""
