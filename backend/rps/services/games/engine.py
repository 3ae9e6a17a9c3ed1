import logging
import threading
from typing import Optional

from .rounds import Round, RoundRegistry

WAITING_MESSAGE = 'Waiting for opponent...'


class Matchmaker:
    """Single-slot waiting buffer."""

    def __init__(self):
        self.waiting = None

    def offer(self, participant):
        """Pair ``participant`` with whoever is waiting.

        Returns ``(player1, player2)`` when a pair forms, otherwise None and
        ``participant`` takes the slot.
        """
        if self.waiting is not None and not self.waiting.is_open:
            # Closed before its disconnect was processed
            self.waiting = None
        if self.waiting is None:
            self.waiting = participant
            return None
        player1, self.waiting = self.waiting, None
        return player1, participant

    def is_waiting(self, participant_id: str) -> bool:
        return self.waiting is not None and self.waiting.id == participant_id

    def discard(self, participant_id: str) -> bool:
        if self.is_waiting(participant_id):
            self.waiting = None
            return True
        return False


class MatchmakingEngine:
    """Matchmaking and round adjudication.

    Every transition (join, move, timer fire, disconnect) runs under one
    re-entrant lock, so the waiting slot, the registry and each round's choices
    are only ever observed by one transition at a time.
    """

    def __init__(self, scheduler, round_duration: float = 10, rng=None, logger: Optional[logging.Logger] = None):
        self.scheduler = scheduler
        self.round_duration = round_duration
        self.rng = rng
        self.logger = logger or logging.getLogger(__name__)
        self.matchmaker = Matchmaker()
        self.registry = RoundRegistry()
        self._lock = threading.RLock()

    @property
    def countdown(self):
        d = self.round_duration
        return int(d) if float(d).is_integer() else d

    def request_join(self, participant) -> Optional[Round]:
        with self._lock:
            if self.matchmaker.is_waiting(participant.id):
                participant.send('status', WAITING_MESSAGE)
                return None
            current = self.registry.round_for(participant.id)
            if current is not None:
                self.logger.info(f"[join-skip] conn={participant.id} already in round={current.id}")
                return None

            pair = self.matchmaker.offer(participant)
            if pair is None:
                self.logger.info(f"[waiting] conn={participant.id}")
                participant.send('status', WAITING_MESSAGE)
                return None
            return self._start_round(*pair)

    def _start_round(self, player1, player2) -> Round:
        rnd = Round(player1, player2, self.round_duration)
        self.registry.add(rnd)
        round_id = rnd.id
        rnd.timer = self.scheduler.schedule(
            self.round_duration,
            lambda: self.expire(round_id),
            label=f"round={round_id}",
        )
        self.logger.info(
            f"[round-start] round={round_id} player1={player1.id} player2={player2.id} duration={self.round_duration}s"
        )
        self.logger.info(f"[timer-set] round={round_id} deadline={rnd.deadline}")
        for role, p in zip(Round.ROLES, rnd.players):
            p.send('start', {'player': role, 'countdown': self.countdown})
        return rnd

    def submit_choice(self, participant_id: str, choice) -> bool:
        """Record a move for the participant's current round.

        Returns True when the move was recorded. Moves from participants not
        in a round, and repeat moves, are ignored.
        """
        with self._lock:
            rnd = self.registry.round_for(participant_id)
            if rnd is None or not rnd.record_choice(participant_id, choice):
                self.logger.debug(f"[move-ignored] conn={participant_id}")
                return False
            self.logger.info(f"[move] round={rnd.id} conn={participant_id} submitted={len(rnd.choices)}/2")
            if rnd.is_complete:
                self._finish(rnd, trigger='moves')
            return True

    def expire(self, round_id: str) -> bool:
        """Deadline callback. Resolves the round unless it already finished."""
        with self._lock:
            rnd = self.registry.get(round_id)
            self.logger.info(f"[timer-fire] round={round_id} open={bool(rnd and rnd.is_open)}")
            if rnd is None or not rnd.is_open:
                self.logger.info(f"[timer-abort] round={round_id} already resolved")
                return False
            self._finish(rnd, trigger='deadline')
            return True

    def _finish(self, rnd: Round, trigger: str) -> None:
        result = rnd.resolve(self.rng)
        self.registry.remove(rnd.id)
        self.logger.info(
            f"[round-resolved] round={rnd.id} trigger={trigger} result={result} random_moves={len(rnd.synthesized)}"
        )
        for p in rnd.players:
            if not p.is_open:
                self.logger.debug(f"[send-skip] round={rnd.id} conn={p.id} closed")
                continue
            try:
                p.send('result', rnd.result_payload(p.id))
            except Exception:
                self.logger.warning(f"[send-fail] round={rnd.id} conn={p.id}", exc_info=True)

    def disconnect(self, participant_id: str) -> None:
        """Forget a closing participant.

        Only the waiting slot is touched; an open round keeps running and
        resolves at its deadline with a random move for the absent side.
        """
        with self._lock:
            if self.matchmaker.discard(participant_id):
                self.logger.info(f"[waiting-cleared] conn={participant_id}")
            rnd = self.registry.round_for(participant_id)
            if rnd is not None:
                self.logger.info(f"[disconnect-in-round] round={rnd.id} conn={participant_id}")

    def round_for(self, participant_id: str) -> Optional[Round]:
        with self._lock:
            return self.registry.round_for(participant_id)

    @property
    def waiting(self):
        return self.matchmaker.waiting

    def snapshot(self) -> dict:
        with self._lock:
            return {
                'waiting': self.matchmaker.waiting is not None,
                'active_rounds': len(self.registry),
            }
