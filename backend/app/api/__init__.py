"""API Layer — FastAPI routes, auth dependencies and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return the {success, message?, data?, count?} envelope

Design Decisions:
    - Thin routes delegate to services
"""
