"""Route Modules — one file per resource.

Invariants:
    - Each module defines its own APIRouter with an /api/v1 prefix and tags
    - Routes never contain business logic: parse the body, call a service, serialize

Design Decisions:
    - Explicit registration in main.py over auto-discovery
"""
