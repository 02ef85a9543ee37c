# ============================================
# FILE: sharelift/core/types.py
# ============================================

"""
All type definitions and enums shared across the pipeline
"""

from enum import Enum


class StorageTier(Enum):
    """Cost/performance class assigned to a destination object"""

    HOT = "hot"
    COOL = "cool"

    @classmethod
    def parse(cls, value: "str | StorageTier | None") -> "StorageTier":
        """Case-insensitive parse; anything other than "hot" selects COOL."""
        if isinstance(value, StorageTier):
            return value
        if value is not None and value.strip().lower() == cls.HOT.value:
            return cls.HOT
        return cls.COOL


class OverwritePolicy(Enum):
    """What to do when the destination object already exists"""

    WARN = "warn"  # Log a warning, overwrite (last writer wins)
    REFUSE = "refuse"  # Fail the task, leave the source in place


class TransferState(Enum):
    """
    Position of a transfer task in its pipeline.

    Non-terminal states run strictly in declaration order; the four terminal
    states mirror ``OutcomeKind``.
    """

    PENDING = "pending"
    LOCATED = "located"
    STREAMING = "streaming"
    FINALIZING = "finalizing"
    DELETING = "deleting"
    COMPLETED = "completed"
    SKIPPED_NOT_FOUND = "skipped_not_found"
    SKIPPED_CONFLICT = "skipped_conflict"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset(
    {
        TransferState.COMPLETED,
        TransferState.SKIPPED_NOT_FOUND,
        TransferState.SKIPPED_CONFLICT,
        TransferState.FAILED,
    }
)


class OutcomeKind(Enum):
    """Final result of one transfer task"""

    COMPLETED = "completed"
    SKIPPED_NOT_FOUND = "skipped_not_found"
    SKIPPED_CONFLICT = "skipped_conflict"
    FAILED = "failed"

    @property
    def is_skipped(self) -> bool:
        return self in (OutcomeKind.SKIPPED_NOT_FOUND, OutcomeKind.SKIPPED_CONFLICT)

    @property
    def state(self) -> TransferState:
        return TransferState(self.value)
