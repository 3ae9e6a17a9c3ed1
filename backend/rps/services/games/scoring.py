import random

MOVES = ('rock', 'paper', 'scissors')

# Each move maps to the move it beats
BEATS = {
    'rock': 'scissors',
    'scissors': 'paper',
    'paper': 'rock',
}


def resolve(move_a, move_b) -> str:
    """Decide a round: returns ``'draw'``, ``'player1'`` or ``'player2'``.

    ``move_a`` belongs to player1 and ``move_b`` to player2. Moves are not
    validated on submission and may be any JSON value, so anything outside
    ``MOVES`` loses to every known move; two different unknown moves fall
    through to player2.
    """
    if move_a == move_b:
        return 'draw'
    known_a = is_known_move(move_a)
    known_b = is_known_move(move_b)
    if known_a and (not known_b or BEATS[move_a] == move_b):
        return 'player1'
    return 'player2'


def is_known_move(move) -> bool:
    return isinstance(move, str) and move in BEATS


def outcome_for(result: str, role: str) -> str:
    """Translate a resolver result into ``win``/``lose``/``draw`` for a role."""
    if result == 'draw':
        return 'draw'
    return 'win' if result == role else 'lose'


def random_move(rng=None) -> str:
    return (rng or random).choice(MOVES)
