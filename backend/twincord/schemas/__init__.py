"""Pydantic Schemas — request validation for API endpoints.

Invariants:
    - Schemas validate at the system boundary; services re-check only what
      can change between validation and use (membership)
    - Public JSON uses camelCase aliases; Python code uses snake_case

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
