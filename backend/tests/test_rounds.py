import random

import pytest

from rps.services.games.rounds import Round, RoundRegistry, RoundState
from rps.services.games.scoring import MOVES


def test_first_submission_wins(make_conn):
    a, b = make_conn('a'), make_conn('b')
    rnd = Round(a, b, 10)
    assert rnd.record_choice('a', 'rock')
    assert not rnd.record_choice('a', 'paper')
    assert rnd.choices == {'a': 'rock'}


def test_unknown_participant_is_ignored(make_conn):
    rnd = Round(make_conn('a'), make_conn('b'), 10)
    assert not rnd.record_choice('stranger', 'rock')
    assert rnd.choices == {}


def test_resolve_fills_missing_moves_and_closes(make_conn):
    a, b = make_conn('a'), make_conn('b')
    rnd = Round(a, b, 10)
    rnd.record_choice('b', 'paper')
    rnd.resolve(random.Random(3))
    assert rnd.state is RoundState.RESOLVED
    assert rnd.choices['b'] == 'paper'
    assert rnd.choices['a'] in MOVES
    assert not rnd.record_choice('a', 'rock')
    with pytest.raises(RuntimeError):
        rnd.resolve()


def test_result_payload_is_from_each_players_view(make_conn):
    a, b = make_conn('a'), make_conn('b')
    rnd = Round(a, b, 10)
    rnd.record_choice('a', 'paper')
    rnd.record_choice('b', 'rock')
    assert rnd.resolve() == 'player1'
    assert rnd.result_payload('a') == {'yourMove': 'paper', 'opponentMove': 'rock', 'outcome': 'win'}
    assert rnd.result_payload('b') == {'yourMove': 'rock', 'opponentMove': 'paper', 'outcome': 'lose'}


def test_registry_indexes_participants(make_conn):
    registry = RoundRegistry()
    rnd = Round(make_conn('a'), make_conn('b'), 10)
    registry.add(rnd)
    assert len(registry) == 1
    assert registry.round_for('a') is rnd
    assert registry.round_for('b') is rnd
    assert registry.get(rnd.id) is rnd

    assert registry.remove(rnd.id) is rnd
    assert registry.round_for('a') is None
    assert rnd.id not in registry
    assert registry.remove(rnd.id) is None


def test_registry_rejects_reentry(make_conn):
    registry = RoundRegistry()
    rnd = Round(make_conn('a'), make_conn('b'), 10)
    registry.add(rnd)
    with pytest.raises(ValueError):
        registry.add(rnd)


def test_round_ids_are_unique(make_conn):
    ids = {Round(make_conn('a'), make_conn('b'), 10).id for _ in range(50)}
    assert len(ids) == 50


def test_resolve_reports_synthesized_players(make_conn):
    rnd = Round(make_conn('a'), make_conn('b'), 10)
    rnd.record_choice('a', 'rock')
    rnd.resolve(random.Random(1))
    assert rnd.synthesized == ['b']
