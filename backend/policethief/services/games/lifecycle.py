"""Round lifecycle for police vs thief sessions.

``GameService`` is the single entry point for every inbound action. Each
operation resolves its session through the registry, takes the session lock
and validates before it mutates anything, so a rejected action leaves the
session exactly as it found it. Notices are delivered while the lock is held
to keep per-session message order.
"""

import logging
import random
from contextlib import contextmanager
from typing import Any, Optional

from policethief.messages import (
    CreateSession,
    DismantleSession,
    Event,
    JoinSession,
    Reconnect,
    StartRound,
    SubmitGuess,
)
from policethief.models import ASSIGNING, ENDED, GUESSING, REVEALING, HistoryEntry
from .errors import ErrorKind, Failure, GameError
from .fanout import Channel, Notifier
from .registry import SessionRegistry
from .scoring import current_totals, resolve_guess, shuffle_assign

logger = logging.getLogger(__name__)


class Outcome:
    """Result of one action: a value on success or a ``Failure``."""

    __slots__ = ('value', 'failure')

    def __init__(self, value: Any = None, failure: Optional[Failure] = None):
        self.value = value
        self.failure = failure

    @property
    def ok(self) -> bool:
        return self.failure is None

    def __repr__(self):
        return f"Outcome(value={self.value!r}, failure={self.failure!r})"


class GameService:
    def __init__(self, channel: Channel, registry: Optional[SessionRegistry] = None,
                 min_players: int = 2, rng: Optional[random.Random] = None):
        self.registry = registry or SessionRegistry()
        self.notifier = Notifier(channel)
        self.min_players = max(2, int(min_players))
        self.rng = rng

    @classmethod
    def from_config(cls, config, channel: Channel) -> 'GameService':
        registry = SessionRegistry(
            code_length=int(config.get('SESSION_CODE_LENGTH', 6)),
            default_rounds=int(config.get('DEFAULT_TOTAL_ROUNDS', 10)),
            max_rounds=int(config.get('MAX_TOTAL_ROUNDS', 50)),
        )
        return cls(channel, registry=registry, min_players=int(config.get('MIN_PLAYERS', 2)))

    def close(self) -> None:
        self.registry.clear()

    # ---- plumbing ----

    @contextmanager
    def _locked(self, code):
        session = self.registry.lookup(code)
        with session.lock:
            if session.dismantled:
                raise GameError(ErrorKind.SESSION_NOT_FOUND, 'Game not found')
            yield session

    def _run(self, requester, operation, *args) -> Outcome:
        try:
            value = operation(*args)
        except GameError as exc:
            return self.reject(requester, exc)
        return Outcome(value=value)

    def dispatch(self, action, channel=None) -> Outcome:
        if isinstance(action, CreateSession):
            return self.create_session(action.host_name, action.total_rounds, channel)
        if isinstance(action, JoinSession):
            return self.join_session(action.code, action.name, channel)
        if isinstance(action, DismantleSession):
            return self.dismantle_session(action.code, action.player_id, channel)
        if isinstance(action, Reconnect):
            return self.reconnect(action.code, action.player_id, channel)
        if isinstance(action, StartRound):
            return self.start_round(action.code, action.player_id, channel)
        if isinstance(action, SubmitGuess):
            return self.submit_guess(action.code, action.player_id, action.target_id, channel)
        raise TypeError(f"unsupported action {action!r}")

    def reject(self, channel, error: GameError) -> Outcome:
        """Report a caller error to the requester only."""
        failure = error.to_failure()
        logger.info(f"[rejected] kind={failure.kind.value} msg={failure.message}")
        self.notifier.error(channel, failure)
        return Outcome(failure=failure)

    # ---- lobby ----

    def create_session(self, host_name=None, total_rounds=None, channel=None) -> Outcome:
        return self._run(channel, self._create, host_name, total_rounds, channel)

    def _create(self, host_name, total_rounds, channel):
        session = self.registry.create(host_name, total_rounds, host_channel=channel)
        with session.lock:
            self.notifier.bind(session, channel)
            ack = {'teamCode': session.code, 'playerId': session.host_id}
            self.notifier.ack(channel, Event.CREATED, ack)
            self.notifier.snapshot(session)
        return ack

    def join_session(self, code, name=None, channel=None) -> Outcome:
        return self._run(channel, self._join, code, name, channel)

    def _join(self, code, name, channel):
        with self._locked(code) as session:
            player = self.registry.join(session.code, name, channel=channel)
            self.notifier.bind(session, channel)
            ack = {'teamCode': session.code, 'playerId': player.id}
            self.notifier.ack(channel, Event.JOINED, ack)
            self.notifier.snapshot(session)
        return ack

    def dismantle_session(self, code, requester_id, channel=None) -> Outcome:
        return self._run(channel, self._dismantle, code, requester_id)

    def _dismantle(self, code, requester_id):
        with self._locked(code) as session:
            self.registry.dismantle(session.code, requester_id)
            self.notifier.dismantled(session)
        return session.code

    def snapshot(self, code) -> dict:
        """Public session view. Raises ``GameError`` if the code is unknown."""
        with self._locked(code) as session:
            return session.to_dict()

    # ---- rounds ----

    def start_round(self, code, player_id, channel=None) -> Outcome:
        return self._run(channel, self._start_round, code, player_id)

    def _start_round(self, code, player_id):
        with self._locked(code) as session:
            if session.status == ENDED:
                raise GameError(ErrorKind.GAME_ENDED, 'Game already ended')
            if session.status in (ASSIGNING, GUESSING):
                raise GameError(ErrorKind.ROUND_IN_PROGRESS, 'Round in progress')
            if len(session.order) < self.min_players:
                raise GameError(ErrorKind.INSUFFICIENT_PLAYERS,
                                f'At least {self.min_players} players are required to start')
            starter_id = session.next_starter_id()
            if player_id != starter_id:
                starter_name = session.player_name(starter_id) or 'the next player'
                raise GameError(ErrorKind.NOT_YOUR_TURN, f"It's {starter_name}'s turn to start the round.")

            assignment = shuffle_assign(session.order, self.rng)
            session.round += 1
            session.status = ASSIGNING
            session.roles = assignment
            logger.info(f"[round-start] code={session.code} round={session.round} starter={player_id}")

            for pid in session.order:
                self.notifier.role(session, session.players[pid])
            self.notifier.police_revealed(session)
            session.status = GUESSING
            self.notifier.snapshot(session)
            return session.round

    def submit_guess(self, code, player_id, target_id, channel=None) -> Outcome:
        return self._run(channel, self._submit_guess, code, player_id, target_id)

    def _submit_guess(self, code, player_id, target_id):
        with self._locked(code) as session:
            roles = session.roles
            if session.status != GUESSING or roles is None:
                raise GameError(ErrorKind.NO_ACTIVE_ROUND, 'No active round')
            if player_id != roles.police_id:
                raise GameError(ErrorKind.NOT_POLICE, 'Only police can guess')
            if target_id not in session.players:
                raise GameError(ErrorKind.INVALID_TARGET, 'Invalid target')

            correct, delta = resolve_guess(roles, target_id, session.order)
            for pid, pts in delta.items():
                session.players[pid].score += pts
            entry = HistoryEntry(session.round, roles, player_id, target_id, correct,
                                 delta, current_totals(session))
            session.history.append(entry)
            logger.info(f"[round-reveal] code={session.code} round={session.round} correct={correct}")

            self.notifier.round_result(session, entry)
            session.status = REVEALING
            session.roles = None
            if session.round >= session.total_rounds:
                session.status = ENDED
                logger.info(f"[finish] code={session.code} finished at round={session.round}")
                self.notifier.game_ended(session)
            self.notifier.snapshot(session)
            return correct

    # ---- presence ----

    def reconnect(self, code, player_id, channel=None) -> Outcome:
        return self._run(channel, self._reconnect, code, player_id, channel)

    def _reconnect(self, code, player_id, channel):
        with self._locked(code) as session:
            player = session.players.get(player_id)
            if player is None:
                raise GameError(ErrorKind.UNKNOWN_PLAYER, 'Unknown player')
            previous = player.channel
            player.channel = channel
            player.connected = channel is not None
            self.notifier.bind(session, channel, previous)
            if session.status == GUESSING and session.roles is not None and channel:
                # Replays only what this player got at round start
                if self.notifier.role(session, player):
                    self.notifier.police_revealed_to(session, channel)
            logger.info(f"[reconnect] code={session.code} player={player.id} status={session.status}")
            self.notifier.snapshot(session)
            return player.id

    def disconnect(self, channel) -> int:
        """Mark every player bound to ``channel`` as disconnected.

        Score, roles and turn order are untouched. Returns the number of
        players affected.
        """
        affected = 0
        for session, player in self.registry.find_by_channel(channel):
            with session.lock:
                if session.dismantled or player.channel != channel:
                    continue
                player.connected = False
                player.channel = None
                affected += 1
                logger.info(f"[disconnect] code={session.code} player={player.id}")
                self.notifier.snapshot(session)
        return affected
