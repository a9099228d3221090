import logging
import threading
from typing import Dict, List, Tuple

from policethief.models import Player, Session, generate_session_code, normalize_code
from .errors import ErrorKind, GameError

logger = logging.getLogger(__name__)


def clamp_rounds(total_rounds, default=10, maximum=50) -> int:
    try:
        value = int(total_rounds)
    except OverflowError:
        # +/-inf, e.g. JSON Infinity
        value = maximum if total_rounds > 0 else 1
    except (TypeError, ValueError):
        value = 0
    if value == 0:
        value = default
    return max(1, min(maximum, value))


class SessionRegistry:
    """Owns the code -> session mapping for one server.

    The registry lock guards only the mapping; per-session state is guarded
    by ``Session.lock``.
    """

    def __init__(self, code_length=6, default_rounds=10, max_rounds=50):
        self.code_length = code_length
        self.default_rounds = default_rounds
        self.max_rounds = max_rounds
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.RLock()

    def __len__(self):
        with self._lock:
            return len(self._sessions)

    def __contains__(self, code):
        with self._lock:
            return normalize_code(code) in self._sessions

    def codes(self) -> List[str]:
        with self._lock:
            return list(self._sessions)

    def create(self, host_name, total_rounds=None, host_channel=None) -> Session:
        host = Player(host_name or 'Host', channel=host_channel)
        rounds = clamp_rounds(total_rounds, self.default_rounds, self.max_rounds)
        with self._lock:
            code = generate_session_code(self.code_length)
            while code in self._sessions:
                code = generate_session_code(self.code_length)
            session = Session(code, host, rounds)
            self._sessions[code] = session
        logger.info(f"[session-create] code={code} host={host.id} rounds={rounds}")
        return session

    def lookup(self, code) -> Session:
        normalized = normalize_code(code)
        with self._lock:
            session = self._sessions.get(normalized)
        if session is None:
            raise GameError(ErrorKind.SESSION_NOT_FOUND, 'Game not found')
        return session

    def join(self, code, name, channel=None) -> Player:
        session = self.lookup(code)
        with session.lock:
            if session.dismantled:
                raise GameError(ErrorKind.SESSION_NOT_FOUND, 'Game not found')
            player = session.add_player(Player(name or 'Player', channel=channel))
        logger.info(f"[session-join] code={session.code} player={player.id}")
        return player

    def dismantle(self, code, requester_id) -> Session:
        session = self.lookup(code)
        with session.lock:
            if session.dismantled:
                raise GameError(ErrorKind.SESSION_NOT_FOUND, 'Game not found')
            if requester_id != session.host_id:
                raise GameError(ErrorKind.NOT_HOST, 'Only the host can dismantle the lobby.')
            session.dismantled = True
            with self._lock:
                self._sessions.pop(session.code, None)
        logger.info(f"[session-dismantle] code={session.code}")
        return session

    def find_by_channel(self, channel) -> List[Tuple[Session, Player]]:
        """Scan every session for players bound to ``channel``."""
        if channel is None:
            return []
        with self._lock:
            sessions = list(self._sessions.values())
        found = []
        for session in sessions:
            with session.lock:
                for player in session.players.values():
                    if player.channel == channel:
                        found.append((session, player))
        return found

    def clear(self) -> None:
        with self._lock:
            for session in self._sessions.values():
                session.dismantled = True
            self._sessions.clear()
