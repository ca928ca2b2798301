"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Every repository of one UnitOfWork shares one transaction
    - UnitOfWork exit without commit() — or on any exception, including
      asyncio.CancelledError — rolls back every write made through it
    - SessionRepository.save compares session.version with the stored version and raises
      ConcurrencyError on mismatch; on success the stored and in-memory version increment
    - AwardLedger.add is unique per (profile_id, badge_id); a duplicate surfaces as
      ConcurrencyError no later than commit()

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE these protocols are never async themselves —
      the shell orchestrates the async calls around the pure logic
"""

from collections.abc import Callable
from typing import Protocol

from storycompass.core.badge_records import BadgeAward, BadgeDefinition
from storycompass.core.session_snapshot import Choice, SessionSnapshot


class SessionRepository(Protocol):
    """Contract for session persistence — implemented by shell."""
    async def get(
        self, session_id: str, for_update: bool = False,
    ) -> SessionSnapshot | None: ...
    async def add(self, session: SessionSnapshot) -> None: ...
    async def save(self, session: SessionSnapshot) -> None: ...
    async def list_for_profile(self, profile_id: str) -> list[SessionSnapshot]: ...


class ChoiceHistorySource(Protocol):
    """Every recorded choice of a profile, across all of its sessions."""
    async def get_all_choices_for_profile(self, profile_id: str) -> list[Choice]: ...


class BadgeCatalog(Protocol):
    """Read-only badge reference data."""
    async def get_by_age_group(self, age_group_id: str) -> list[BadgeDefinition]: ...


class AwardLedger(Protocol):
    """Durable record of badges already awarded to a profile."""
    async def exists(self, profile_id: str, badge_id: str) -> bool: ...
    async def get_for_profile(self, profile_id: str) -> list[BadgeAward]: ...
    async def add(self, award: BadgeAward) -> None: ...


class ProfileRepository(Protocol):
    """Read-only profile lookups needed by badge resolution."""
    async def get_age_group(self, profile_id: str) -> str | None: ...


class UnitOfWork(Protocol):
    """One transaction spanning all repositories — implemented by shell."""
    sessions: SessionRepository
    choices: ChoiceHistorySource
    badges: BadgeCatalog
    awards: AwardLedger
    profiles: ProfileRepository

    async def __aenter__(self) -> "UnitOfWork": ...
    async def __aexit__(self, exc_type, exc, tb) -> None: ...
    async def commit(self) -> None: ...


# Services receive a factory and open one unit of work per command
UowFactory = Callable[[], UnitOfWork]
