"""Draft error kinds.

Every rejection the coordinator can hand back to a caller is a
:class:`DraftError` subclass carrying an :class:`ErrorKind`, so request
surfaces can respond precisely ("not your turn" vs "player already taken")
without parsing messages.
"""

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    NOT_YOUR_TURN = "not_your_turn"
    ALREADY_DRAFTED = "already_drafted"
    SLOT_CONFLICT = "slot_conflict"
    INVALID_PARAMETER = "invalid_parameter"
    STORAGE_UNAVAILABLE = "storage_unavailable"


class DraftError(Exception):
    """Base class for recoverable draft errors."""

    kind: ErrorKind = ErrorKind.INVALID_STATE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def is_turn_taken(self) -> bool:
        """Whether the caller should re-fetch state because the slot moved on."""
        return self.kind in (
            ErrorKind.NOT_YOUR_TURN,
            ErrorKind.ALREADY_DRAFTED,
            ErrorKind.SLOT_CONFLICT,
        )


class NotFoundError(DraftError):
    """League, team or player does not exist."""

    kind = ErrorKind.NOT_FOUND


class InvalidStateError(DraftError):
    """League or draft is not in a state that accepts the request."""

    kind = ErrorKind.INVALID_STATE


class NotYourTurnError(DraftError):
    """Requested slot or team does not match the team on the clock."""

    kind = ErrorKind.NOT_YOUR_TURN


class AlreadyDraftedError(DraftError):
    """Player has already been picked in this league."""

    kind = ErrorKind.ALREADY_DRAFTED


class SlotConflictError(DraftError):
    """Slot was filled by a concurrent pick."""

    kind = ErrorKind.SLOT_CONFLICT


class InvalidParameterError(DraftError, ValueError):
    """Malformed round, slot or team counts."""

    kind = ErrorKind.INVALID_PARAMETER


class StorageUnavailableError(DraftError):
    """Pick storage kept failing after bounded retries."""

    kind = ErrorKind.STORAGE_UNAVAILABLE
