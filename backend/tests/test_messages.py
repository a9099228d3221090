import pytest

from policethief.messages import (
    ACTIONS,
    CreateSession,
    Event,
    JoinSession,
    StartRound,
    SubmitGuess,
)
from policethief.services.games.errors import ErrorKind, GameError


def test_every_inbound_event_has_an_action():
    assert set(ACTIONS) == {
        Event.CREATE, Event.DISMANTLE, Event.JOIN, Event.RECONNECT, Event.START, Event.GUESS,
    }


def test_create_accepts_missing_fields():
    assert CreateSession.from_payload(None) == CreateSession(None, None)
    assert CreateSession.from_payload({'hostName': '  Ann ', 'totalRounds': 4}) == CreateSession('Ann', 4)


def test_create_rejects_non_numeric_rounds():
    with pytest.raises(GameError) as excinfo:
        CreateSession.from_payload({'totalRounds': [3]})
    assert excinfo.value.kind is ErrorKind.BAD_REQUEST


def test_join_requires_code():
    assert JoinSession.from_payload({'teamCode': 'abc123'}) == JoinSession('abc123', None)
    with pytest.raises(GameError) as excinfo:
        JoinSession.from_payload({'playerName': 'Bob'})
    assert excinfo.value.kind is ErrorKind.BAD_REQUEST
    assert 'teamCode' in excinfo.value.message


@pytest.mark.parametrize('payload', [
    'not-a-dict',
    {'teamCode': 'ABC', 'playerId': 7},
    {'teamCode': '', 'playerId': 'p1'},
])
def test_start_rejects_malformed(payload):
    with pytest.raises(GameError) as excinfo:
        StartRound.from_payload(payload)
    assert excinfo.value.kind is ErrorKind.BAD_REQUEST


def test_guess_needs_target():
    action = SubmitGuess.from_payload({'teamCode': 'ABC', 'playerId': 'p1', 'targetId': 'p2'})
    assert (action.code, action.player_id, action.target_id) == ('ABC', 'p1', 'p2')
    with pytest.raises(GameError):
        SubmitGuess.from_payload({'teamCode': 'ABC', 'playerId': 'p1'})


def test_dispatch_routes_actions(service, channel):
    created = service.dispatch(CreateSession('Ann', 2), 'sid-ann')
    code = created.value['teamCode']
    joined = service.dispatch(JoinSession(code, 'Bob'), 'sid-bob')
    assert joined.ok
    started = service.dispatch(StartRound(code, created.value['playerId']), 'sid-ann')
    assert started.value == 1
    with pytest.raises(TypeError):
        service.dispatch(object())
