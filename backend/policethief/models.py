import random
import threading
import uuid
from types import MappingProxyType
from typing import Dict, List, Optional, Tuple

# Unambiguous alphabet: no I, O, 0 or 1
CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'

LOBBY = 'lobby'
ASSIGNING = 'assigning'
GUESSING = 'guessing'
REVEALING = 'revealing'
ENDED = 'ended'

POLICE = 'POLICE'
THIEF = 'THIEF'
CIVILIAN = 'CIVILIAN'


def generate_session_code(length=6):
    """Generate a short session code. Uniqueness is checked by the registry."""
    return ''.join(random.choices(CODE_ALPHABET, k=length))


def generate_player_id():
    return str(uuid.uuid4())


def normalize_code(code):
    return (code or '').strip().upper()


class Player:
    def __init__(self, name, channel=None, player_id=None):
        self.id = player_id or generate_player_id()
        self.name = name
        self.score = 0
        self.connected = channel is not None
        # Current Socket.IO sid; rebound on reconnect, cleared on disconnect
        self.channel = channel

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'score': self.score,
            'connected': self.connected,
        }


class RoleAssignment:
    """Secret roles for one round. Owned by its session until the reveal."""

    def __init__(self, police_id: str, thief_id: str, civilians: List[Tuple[str, int]]):
        self.police_id = police_id
        self.thief_id = thief_id
        self.civilians = list(civilians)

    def civilian_points(self) -> Dict[str, int]:
        return dict(self.civilians)

    def player_ids(self) -> List[str]:
        return [self.police_id, self.thief_id] + [pid for pid, _ in self.civilians]


class HistoryEntry:
    """Record of one completed round. Never mutated after it is appended."""

    __slots__ = ('round', 'police_id', 'thief_id', 'civilians', 'guess', 'delta', 'totals')

    def __init__(self, round_no, assignment, guesser_id, target_id, correct, delta, totals):
        fields = {
            'round': round_no,
            'police_id': assignment.police_id,
            'thief_id': assignment.thief_id,
            'civilians': tuple(assignment.civilians),
            'guess': (guesser_id, target_id, correct),
            'delta': MappingProxyType(dict(delta)),
            'totals': MappingProxyType(dict(totals)),
        }
        for name, value in fields.items():
            object.__setattr__(self, name, value)

    def __setattr__(self, name, value):
        raise AttributeError(f"HistoryEntry is read-only: {name}")

    def __delattr__(self, name):
        raise AttributeError(f"HistoryEntry is read-only: {name}")

    def to_dict(self):
        by, target, correct = self.guess
        return {
            'round': self.round,
            'policeId': self.police_id,
            'thiefId': self.thief_id,
            'civilians': [{'id': pid, 'pts': pts} for pid, pts in self.civilians],
            'guess': {'by': by, 'targetId': target, 'correct': correct},
            'delta': dict(self.delta),
            'totals': dict(self.totals),
        }


class Session:
    def __init__(self, code, host: Player, total_rounds):
        self.code = code
        self.host_id = host.id
        self.players: Dict[str, Player] = {}
        self.order: List[str] = []
        self.total_rounds = total_rounds
        self.round = 0
        self.status = LOBBY
        self.roles: Optional[RoleAssignment] = None
        self.history: List[HistoryEntry] = []
        self.dismantled = False
        self.lock = threading.RLock()
        self.add_player(host)

    @property
    def room(self):
        return f"session:{self.code}"

    def add_player(self, player: Player) -> Player:
        self.players[player.id] = player
        self.order.append(player.id)
        return player

    def next_starter_id(self):
        if not self.order:
            return None
        return self.order[self.round % len(self.order)]

    def player_name(self, player_id):
        player = self.players.get(player_id)
        return player.name if player else None

    def to_dict(self):
        return {
            'teamCode': self.code,
            'hostId': self.host_id,
            'players': [self.players[pid].to_dict() for pid in self.order],
            'totalRounds': self.total_rounds,
            'round': self.round,
            'status': self.status,
            'order': list(self.order),
            'history': [entry.to_dict() for entry in self.history],
        }
