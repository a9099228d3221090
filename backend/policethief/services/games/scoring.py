import random
from typing import Dict, Iterable, List, Optional, Tuple

from policethief.models import CIVILIAN, POLICE, THIEF, RoleAssignment, Session
from .errors import ErrorKind, GameError

# Civilian points by rank, highest first; later ranks fall back to the minimum
CIVILIAN_POINTS = [900, 800, 700, 600, 500, 400, 300, 200]
CIVILIAN_MIN_POINTS = 100
POLICE_WIN = 1000
THIEF_WIN = 1000


def civilian_points_for(rank: int) -> int:
    if rank < len(CIVILIAN_POINTS):
        return CIVILIAN_POINTS[rank]
    return CIVILIAN_MIN_POINTS


def shuffle_assign(player_ids: Iterable[str], rng: Optional[random.Random] = None) -> RoleAssignment:
    """Shuffle the players and deal police, thief and ranked civilians.

    ``rng`` may be a seeded ``random.Random`` for reproducible deals.
    """
    ids = list(player_ids)
    if len(ids) < 2:
        raise GameError(ErrorKind.INSUFFICIENT_PLAYERS, 'At least 2 players are required to assign roles')
    (rng or random).shuffle(ids)
    civilians = [(pid, civilian_points_for(rank)) for rank, pid in enumerate(ids[2:])]
    return RoleAssignment(ids[0], ids[1], civilians)


def resolve_guess(assignment: RoleAssignment, target_id: str, player_ids: Iterable[str]) -> Tuple[bool, Dict[str, int]]:
    """Return ``(correct, delta)`` for a police guess.

    Every id in ``player_ids`` gets an entry; civilians are paid the same
    whether or not the guess was right.
    """
    correct = target_id == assignment.thief_id
    delta = {pid: 0 for pid in player_ids}
    if correct:
        delta[assignment.police_id] = POLICE_WIN
        delta[assignment.thief_id] = 0
    else:
        delta[assignment.police_id] = 0
        delta[assignment.thief_id] = THIEF_WIN
    for pid, pts in assignment.civilians:
        delta[pid] = delta.get(pid, 0) + pts
    return correct, delta


def role_of(assignment: RoleAssignment, player_id: str) -> Tuple[str, int]:
    if player_id == assignment.police_id:
        return POLICE, POLICE_WIN
    if player_id == assignment.thief_id:
        return THIEF, 0
    return CIVILIAN, assignment.civilian_points().get(player_id, 0)


def current_totals(session: Session) -> Dict[str, int]:
    return {pid: session.players[pid].score for pid in session.order}


def winners(session: Session) -> List[str]:
    """Ids of every player tied on the top score."""
    if not session.players:
        return []
    top = max(p.score for p in session.players.values())
    return [pid for pid in session.order if session.players[pid].score == top]
