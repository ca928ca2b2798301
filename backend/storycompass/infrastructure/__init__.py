"""Infrastructure Layer — persistence adapters and cross-cutting concerns.

Invariants:
    - Infrastructure implements core Protocols; core never imports infrastructure
    - All SQLAlchemy errors mapped to core store errors before leaving this package
"""
