import enum
import time
import uuid
from typing import Dict, List, Optional

from .scoring import outcome_for, random_move, resolve


class RoundState(enum.Enum):
    OPEN = 'open'
    RESOLVED = 'resolved'


class Round:
    """One pairing of two participants, from creation to resolution.

    Participants are connection handles: anything with an ``id``, an
    ``is_open`` flag and ``send(type, payload)``. Rounds are single use; once
    resolved they accept nothing further.
    """

    ROLES = ('player1', 'player2')

    def __init__(self, player1, player2, duration: float):
        self.id = str(uuid.uuid4())
        self.players = (player1, player2)
        self.choices: Dict[str, str] = {}
        self.duration = duration
        self.created_at = time.time()
        self.deadline = self.created_at + duration
        self.state = RoundState.OPEN
        self.timer = None
        self.result: Optional[str] = None
        self.synthesized: List[str] = []

    @property
    def is_open(self) -> bool:
        return self.state is RoundState.OPEN

    @property
    def is_complete(self) -> bool:
        return all(p.id in self.choices for p in self.players)

    def has_player(self, participant_id: str) -> bool:
        return any(p.id == participant_id for p in self.players)

    def role_of(self, participant_id: str) -> Optional[str]:
        for role, p in zip(self.ROLES, self.players):
            if p.id == participant_id:
                return role
        return None

    def opponent_of(self, participant_id: str):
        p1, p2 = self.players
        if p1.id == participant_id:
            return p2
        if p2.id == participant_id:
            return p1
        return None

    def record_choice(self, participant_id: str, choice) -> bool:
        """Record a choice. First submission wins; returns False when ignored.

        An empty choice (no payload, ``''``) is not a move: the player may
        still submit one, otherwise a random move is drawn at the deadline.
        """
        if choice is None or choice == '':
            return False
        if not self.is_open or not self.has_player(participant_id):
            return False
        if participant_id in self.choices:
            return False
        self.choices[participant_id] = choice
        return True

    def fill_missing(self, rng=None) -> list:
        """Synthesize a random move for each player without one. Returns their ids."""
        filled = []
        for p in self.players:
            if p.id not in self.choices:
                self.choices[p.id] = random_move(rng)
                filled.append(p.id)
        return filled

    def resolve(self, rng=None) -> str:
        """Close the round and compute the outcome. Only valid while open."""
        if not self.is_open:
            raise RuntimeError(f"round {self.id} already resolved")
        self.synthesized = self.fill_missing(rng)
        p1, p2 = self.players
        self.result = resolve(self.choices[p1.id], self.choices[p2.id])
        self.state = RoundState.RESOLVED
        if self.timer is not None:
            self.timer.cancel()
        return self.result

    def result_payload(self, participant_id: str) -> dict:
        opponent = self.opponent_of(participant_id)
        return {
            'yourMove': self.choices.get(participant_id),
            'opponentMove': self.choices.get(opponent.id) if opponent else None,
            'outcome': outcome_for(self.result, self.role_of(participant_id)),
        }


class RoundRegistry:
    """Open rounds by id, plus a participant -> round index."""

    def __init__(self):
        self._rounds: Dict[str, Round] = {}
        self._by_participant: Dict[str, str] = {}

    def add(self, rnd: Round) -> None:
        if rnd.id in self._rounds:
            raise ValueError(f"round {rnd.id} already registered")
        self._rounds[rnd.id] = rnd
        for p in rnd.players:
            self._by_participant[p.id] = rnd.id

    def remove(self, round_id: str) -> Optional[Round]:
        rnd = self._rounds.pop(round_id, None)
        if rnd is None:
            return None
        for p in rnd.players:
            # Only drop index entries that still point at this round
            if self._by_participant.get(p.id) == round_id:
                del self._by_participant[p.id]
        return rnd

    def get(self, round_id: str) -> Optional[Round]:
        return self._rounds.get(round_id)

    def round_for(self, participant_id: str) -> Optional[Round]:
        round_id = self._by_participant.get(participant_id)
        if round_id is None:
            return None
        return self._rounds.get(round_id)

    def __contains__(self, round_id) -> bool:
        return round_id in self._rounds

    def __len__(self) -> int:
        return len(self._rounds)
