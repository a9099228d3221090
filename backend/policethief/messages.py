"""Tagged inbound actions and outbound event names.

Socket.IO payloads are plain dicts; each inbound event is validated into one
of the action classes below before it reaches the game service.
"""

from enum import Enum

from policethief.services.games.errors import ErrorKind, GameError


class Event(str, Enum):
    # inbound
    CREATE = 'lobby:create'
    DISMANTLE = 'lobby:dismantle'
    JOIN = 'lobby:join'
    RECONNECT = 'player:reconnect'
    START = 'round:start'
    GUESS = 'police:guess'
    # outbound
    CONNECTED = 'connected'
    CREATED = 'lobby:created'
    JOINED = 'lobby:joined'
    LOBBY_UPDATE = 'lobby:update'
    ROLE = 'round:role'
    POLICE_REVEALED = 'round:police_revealed'
    ROUND_RESULT = 'round:result'
    GAME_ENDED = 'game:ended'
    DISMANTLED = 'game:dismantled'
    ERROR = 'error:toast'
    INTERNAL_ERROR = 'error:internal'


def _require_str(data, key):
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise GameError(ErrorKind.BAD_REQUEST, f'{key} is required')
    return value.strip()


def _optional_str(data, key):
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise GameError(ErrorKind.BAD_REQUEST, f'{key} must be a string')
    return value.strip() or None


class Action:
    event: Event = None

    @classmethod
    def from_payload(cls, data):
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise GameError(ErrorKind.BAD_REQUEST, 'Payload must be an object')
        return cls._parse(data)

    @classmethod
    def _parse(cls, data):
        raise NotImplementedError

    def __eq__(self, other):
        return type(self) is type(other) and vars(self) == vars(other)

    def __repr__(self):
        fields = ', '.join(f'{k}={v!r}' for k, v in vars(self).items())
        return f'{type(self).__name__}({fields})'


class CreateSession(Action):
    event = Event.CREATE

    def __init__(self, host_name, total_rounds=None):
        self.host_name = host_name
        self.total_rounds = total_rounds

    @classmethod
    def _parse(cls, data):
        total = data.get('totalRounds')
        if isinstance(total, bool) or not isinstance(total, (int, float, str, type(None))):
            raise GameError(ErrorKind.BAD_REQUEST, 'totalRounds must be a number')
        return cls(_optional_str(data, 'hostName'), total)


class DismantleSession(Action):
    event = Event.DISMANTLE

    def __init__(self, code, player_id):
        self.code = code
        self.player_id = player_id

    @classmethod
    def _parse(cls, data):
        return cls(_require_str(data, 'teamCode'), _require_str(data, 'playerId'))


class JoinSession(Action):
    event = Event.JOIN

    def __init__(self, code, name=None):
        self.code = code
        self.name = name

    @classmethod
    def _parse(cls, data):
        return cls(_require_str(data, 'teamCode'), _optional_str(data, 'playerName'))


class Reconnect(Action):
    event = Event.RECONNECT

    def __init__(self, code, player_id):
        self.code = code
        self.player_id = player_id

    @classmethod
    def _parse(cls, data):
        return cls(_require_str(data, 'teamCode'), _require_str(data, 'playerId'))


class StartRound(Action):
    event = Event.START

    def __init__(self, code, player_id):
        self.code = code
        self.player_id = player_id

    @classmethod
    def _parse(cls, data):
        return cls(_require_str(data, 'teamCode'), _require_str(data, 'playerId'))


class SubmitGuess(Action):
    event = Event.GUESS

    def __init__(self, code, player_id, target_id):
        self.code = code
        self.player_id = player_id
        self.target_id = target_id

    @classmethod
    def _parse(cls, data):
        return cls(
            _require_str(data, 'teamCode'),
            _require_str(data, 'playerId'),
            _require_str(data, 'targetId'),
        )


ACTIONS = {cls.event: cls for cls in (
    CreateSession, DismantleSession, JoinSession, Reconnect, StartRound, SubmitGuess,
)}
