"""Caller-error taxonomy for game actions.

Domain code raises :class:`GameError`; :class:`~.lifecycle.GameService`
converts it into a :class:`Failure` value that is reported to the requester
only. Anything that is not a ``GameError`` is a bug and is left to propagate.
"""

from enum import Enum


class ErrorKind(str, Enum):
    SESSION_NOT_FOUND = 'SessionNotFound'
    UNKNOWN_PLAYER = 'UnknownPlayer'
    NOT_HOST = 'NotHost'
    NOT_YOUR_TURN = 'NotYourTurn'
    ROUND_IN_PROGRESS = 'RoundInProgress'
    GAME_ENDED = 'GameEnded'
    NO_ACTIVE_ROUND = 'NoActiveRound'
    NOT_POLICE = 'NotPolice'
    INVALID_TARGET = 'InvalidTarget'
    INSUFFICIENT_PLAYERS = 'InsufficientPlayers'
    BAD_REQUEST = 'BadRequest'


class GameError(Exception):
    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def to_failure(self) -> 'Failure':
        return Failure(self.kind, self.message)


class Failure:
    """A reported caller error. Carries no state and changes none."""

    __slots__ = ('kind', 'message')

    def __init__(self, kind: ErrorKind, message: str):
        self.kind = kind
        self.message = message

    def __eq__(self, other):
        return isinstance(other, Failure) and (self.kind, self.message) == (other.kind, other.message)

    def __repr__(self):
        return f"Failure({self.kind.value}, {self.message!r})"

    def to_dict(self):
        return {'kind': self.kind.value, 'message': self.message}
