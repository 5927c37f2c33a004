"""Infrastructure Layer — database session management and logging setup.

Invariants:
    - Cross-cutting concerns only; no storefront business rules live here
"""
