"""Project session state into outbound notices and hand them to a channel.

Two audiences exist: the whole session (its Socket.IO room) and a single
player (their current sid). Role data only ever goes to a single player.
"""

from typing import Optional

from policethief.messages import Event
from policethief.models import HistoryEntry, Player, Session
from .errors import Failure
from .scoring import current_totals, role_of, winners


class Channel:
    """Delivery interface the notifier talks to."""

    def publish(self, room: str, event: str, payload: dict) -> None:
        raise NotImplementedError

    def send(self, channel: str, event: str, payload: dict) -> None:
        raise NotImplementedError

    def join(self, channel: str, room: str) -> None:
        raise NotImplementedError

    def leave(self, channel: str, room: str) -> None:
        raise NotImplementedError

    def close_room(self, room: str) -> None:
        raise NotImplementedError


class SocketIOChannel(Channel):
    """Channel backed by a ``flask_socketio.SocketIO`` server in one namespace."""

    def __init__(self, socketio, namespace='/ws'):
        self.socketio = socketio
        self.namespace = namespace

    def publish(self, room, event, payload):
        self.socketio.emit(event, payload, to=room, namespace=self.namespace)

    def send(self, channel, event, payload):
        self.socketio.emit(event, payload, to=channel, namespace=self.namespace)

    def join(self, channel, room):
        self.socketio.server.enter_room(channel, room, namespace=self.namespace)

    def leave(self, channel, room):
        self.socketio.server.leave_room(channel, room, namespace=self.namespace)

    def close_room(self, room):
        self.socketio.server.close_room(room, namespace=self.namespace)


class Notifier:
    def __init__(self, channel: Channel):
        self.channel = channel

    # ---- session-wide ----

    def snapshot(self, session: Session) -> None:
        self.channel.publish(session.room, Event.LOBBY_UPDATE.value, session.to_dict())

    def police_revealed(self, session: Session) -> None:
        self.channel.publish(session.room, Event.POLICE_REVEALED.value, police_reveal_payload(session))

    def round_result(self, session: Session, entry: HistoryEntry) -> None:
        _, _, correct = entry.guess
        payload = {
            'round': entry.round,
            'correct': correct,
            'police': {'id': entry.police_id, 'name': session.player_name(entry.police_id)},
            'thief': {'id': entry.thief_id, 'name': session.player_name(entry.thief_id)},
            'civilians': [
                {'id': pid, 'name': session.player_name(pid), 'pts': pts}
                for pid, pts in entry.civilians
            ],
            'delta': dict(entry.delta),
            'totals': dict(entry.totals),
        }
        self.channel.publish(session.room, Event.ROUND_RESULT.value, payload)

    def game_ended(self, session: Session) -> None:
        top = set(winners(session))
        payload = {
            'winners': [session.players[pid].to_dict() for pid in session.order if pid in top],
            'totals': current_totals(session),
        }
        self.channel.publish(session.room, Event.GAME_ENDED.value, payload)

    def dismantled(self, session: Session) -> None:
        self.channel.publish(session.room, Event.DISMANTLED.value,
                             {'message': 'The host has dismantled the lobby.'})
        self.channel.close_room(session.room)

    # ---- single recipient ----

    def role(self, session: Session, player: Player) -> bool:
        """Privately tell one player their role.

        Returns False if the player is unreachable or was dealt no role this
        round (joined after it started).
        """
        roles = session.roles
        if not player.channel or roles is None or player.id not in roles.player_ids():
            return False
        role, points = role_of(roles, player.id)
        self.channel.send(player.channel, Event.ROLE.value, {'role': role, 'points': points})
        return True

    def police_revealed_to(self, session: Session, channel: str) -> None:
        self.channel.send(channel, Event.POLICE_REVEALED.value, police_reveal_payload(session))

    def ack(self, channel: Optional[str], event: Event, payload: dict) -> None:
        if channel:
            self.channel.send(channel, event.value, payload)

    def error(self, channel: Optional[str], failure: Failure) -> None:
        if channel:
            self.channel.send(channel, Event.ERROR.value, failure.to_dict())

    # ---- room membership ----

    def bind(self, session: Session, channel: Optional[str], previous: Optional[str] = None) -> None:
        if previous and previous != channel:
            self.channel.leave(previous, session.room)
        if channel:
            self.channel.join(channel, session.room)


def police_reveal_payload(session: Session) -> dict:
    police_id = session.roles.police_id
    return {
        'round': session.round,
        'policeId': police_id,
        'policeName': session.player_name(police_id),
    }
