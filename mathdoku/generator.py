import random
import logging
from dataclasses import dataclass
from typing import List, Dict, Iterator, Optional

from . import config
from .arithmetic import PossibilityCache
from .board import Board, Cage, make_board
from .carver import make_cages
from .solver import SolvingBoard, SolveStatus, ContradictionError

logger = logging.getLogger("mathdoku_generator")


def classify(rounds: int) -> str:
    """Maps a solving round count onto a difficulty label."""
    for level, threshold in zip(config.DIFFICULTY_LEVELS, config.DIFFICULTY_ROUND_THRESHOLDS):
        if rounds <= threshold:
            return level
    return config.DIFFICULTY_LEVELS[-1]


@dataclass
class Caging:
    """A carving that propagation solves uniquely."""
    cages: List[Cage]
    rounds: int
    attempts: int  # carvings tried, this one included

    @property
    def difficulty(self) -> str:
        return classify(self.rounds)


class CagingStats:
    """Tallies carvings: accepted ones per solving round count, and the ones propagation got stuck on."""

    def __init__(self):
        self.counts: Dict[int, int] = {}
        self.failures = 0

    def record_failure(self):
        self.failures += 1

    def record_success(self, rounds: int):
        self.counts[rounds] = self.counts.get(rounds, 0) + 1

    @property
    def successes(self) -> int:
        return sum(self.counts.values())

    @property
    def success_rate(self) -> float:
        total = self.successes + self.failures
        return self.successes / total if total else 0.0

    def summary(self) -> str:
        counts = ", ".join(f"{rounds}: {count}" for rounds, count in sorted(self.counts.items()))
        return f"Successes: {self.success_rate * 100:.2f}%; Failed: {self.failures}; Counts: {counts}"


class PuzzleGenerator:
    """
    Pipeline for one filled board:
    1. Shuffle a Latin square
    2. Carve cages
    3. Solve by propagation
    4. If not uniquely solved, carve again (the board stays)
    """

    def __init__(self, size: int, shuffle_rounds: int = config.SHUFFLE_ROUNDS,
                 rng: Optional[random.Random] = None, cache: Optional[PossibilityCache] = None,
                 max_attempts: Optional[int] = None, board: Optional[Board] = None):
        self.size = size
        self.rng = rng or random.Random()
        self.cache = cache if cache is not None else PossibilityCache()
        self.max_attempts = max_attempts
        self.board = board if board is not None else make_board(size, shuffle_rounds, self.rng)
        self.stats = CagingStats()

    def make_caging(self) -> Caging:
        attempt = 0
        while self.max_attempts is None or attempt < self.max_attempts:
            attempt += 1
            cages = make_cages(self.board, self.rng)
            solving_board = SolvingBoard.from_cages(self.size, cages, self.cache)
            rounds = solving_board.solve()
            status = solving_board.status()

            if status == SolveStatus.CONTRADICTION:
                # Cages come from a real board, so this means a bug in carving or propagation
                logger.error(f"Failed solve\n{solving_board}")
                raise ContradictionError(f"Contradiction while solving {len(cages)} cages: {cages}")
            if status == SolveStatus.SOLVED:
                self.stats.record_success(rounds)
                logger.info(f"Solved caging in {rounds} rounds after {attempt} attempts. {self.stats.summary()}")
                return Caging(cages, rounds, attempt)

            self.stats.record_failure()
            logger.debug(f"Attempt {attempt}: stuck after {rounds} rounds")

        raise RuntimeError(f"No uniquely solvable caging after {self.max_attempts} attempts")

    def generate(self, count: Optional[int] = None) -> Iterator[Caging]:
        made = 0
        while count is None or made < count:
            yield self.make_caging()
            made += 1
