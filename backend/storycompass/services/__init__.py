"""Services Layer — command orchestration around the pure core.

Invariants:
    - One unit of work per command; commit is the last step, never the first
    - Services raise core errors (core/errors.py); HTTP mapping lives in api/

Design Decisions:
    - One service per concern (lifecycle, choices, scoring, awarding, finalize)
    - Dependencies passed in explicitly (uow factory, clock, settings values)
"""
