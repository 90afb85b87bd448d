"""Sheet sync state and result types.

A lead is either Unsynced (no sheet row yet) or Synced(row_ref). There is no
way back from Synced: deleting a lead does not reset anything and a failed
attempt simply leaves the lead Unsynced for the next reconcile sweep.
"""

import enum
from dataclasses import dataclass
from typing import Optional, Union

from app.models.lead import Lead


@dataclass(frozen=True)
class Unsynced:
    pass


@dataclass(frozen=True)
class Synced:
    row_ref: int


SyncState = Union[Unsynced, Synced]


def sync_state(lead: Lead) -> SyncState:
    """Read the sync state of a lead from its sheet_row_id column."""
    if lead.sheet_row_id is None:
        return Unsynced()
    return Synced(row_ref=lead.sheet_row_id)


class SyncOutcome(str, enum.Enum):
    SYNCED = "synced"
    UNAVAILABLE = "unavailable"  # sheet client not configured
    FAILED = "failed"  # network / quota / auth / bad response
    ALREADY_SYNCED = "already_synced"  # idempotency guard tripped, benign


@dataclass(frozen=True)
class SyncResult:
    """Outcome of one sheet operation. Sheet code returns these instead of raising."""
    outcome: SyncOutcome
    row_ref: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome == SyncOutcome.SYNCED

    @classmethod
    def synced(cls, row_ref: Optional[int] = None) -> "SyncResult":
        return cls(SyncOutcome.SYNCED, row_ref=row_ref)

    @classmethod
    def unavailable(cls, error: str = "Google Sheets not configured") -> "SyncResult":
        return cls(SyncOutcome.UNAVAILABLE, error=error)

    @classmethod
    def failed(cls, error: str) -> "SyncResult":
        return cls(SyncOutcome.FAILED, error=error)

    @classmethod
    def already_synced(cls, row_ref: Optional[int] = None) -> "SyncResult":
        return cls(SyncOutcome.ALREADY_SYNCED, row_ref=row_ref, error="Lead already synced")
