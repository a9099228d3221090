from flask import current_app, request
from flask_socketio import emit

from policethief import get_game_service, socketio
from policethief.messages import (
    CreateSession,
    DismantleSession,
    Event,
    JoinSession,
    Reconnect,
    StartRound,
    SubmitGuess,
)
from policethief.services.games.errors import GameError


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _dispatch(action_cls, data):
    """Validate ``data`` into ``action_cls`` and hand it to the game service."""
    service = get_game_service()
    sid = _get_sid()
    try:
        action = action_cls.from_payload(data)
    except GameError as exc:
        return service.reject(sid, exc)
    return service.dispatch(action, sid)


def handle_connect(auth=None):
    emit(Event.CONNECTED.value, {'message': 'Connected'})


def handle_disconnect(reason=None):
    sid = _get_sid()
    affected = get_game_service().disconnect(sid)
    if affected:
        current_app.logger.info(f"[socket-disconnect] sid={sid} players={affected} reason={reason}")


def handle_create_lobby(data=None):
    _dispatch(CreateSession, data)


def handle_dismantle_lobby(data=None):
    _dispatch(DismantleSession, data)


def handle_join_lobby(data=None):
    _dispatch(JoinSession, data)


def handle_reconnect(data=None):
    _dispatch(Reconnect, data)


def handle_start_round(data=None):
    _dispatch(StartRound, data)


def handle_police_guess(data=None):
    _dispatch(SubmitGuess, data)


def handle_unexpected_error(exc):
    # Not a caller error: log it as a bug and tell only the requester
    current_app.logger.exception(f"[socket-error] sid={_get_sid()} event={getattr(request, 'event', None)}")
    emit(Event.INTERNAL_ERROR.value, {'message': 'Internal server error'})


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event(Event.CREATE.value, handle_create_lobby, namespace=namespace)
    socketio.on_event(Event.DISMANTLE.value, handle_dismantle_lobby, namespace=namespace)
    socketio.on_event(Event.JOIN.value, handle_join_lobby, namespace=namespace)
    socketio.on_event(Event.RECONNECT.value, handle_reconnect, namespace=namespace)
    socketio.on_event(Event.START.value, handle_start_round, namespace=namespace)
    socketio.on_event(Event.GUESS.value, handle_police_guess, namespace=namespace)
    socketio.on_error(namespace)(handle_unexpected_error)
