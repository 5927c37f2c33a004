"""Pydantic Schemas — request validation and response envelope for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input)
    - JSON keys are camelCase on the wire, snake_case in Python
    - Domain types from core/ used for enum fields

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
