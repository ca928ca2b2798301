"""Pydantic Schemas — request/response contracts for API endpoints.

Invariants:
    - Schemas validate at the system boundary; domain rules stay in core/
    - Responses are built from core snapshots/records via from_* classmethods

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
    - Required string fields default to "": emptiness is reported by core validation
      with the domain field label (SessionId, ChoiceText, ...) rather than by Pydantic
"""
