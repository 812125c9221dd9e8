import random
import logging
from dataclasses import dataclass, field
from enum import Enum
from math import prod
from typing import List, Tuple, Dict, Any, Optional

from . import config

logger = logging.getLogger("mathdoku_board")

Board = List[List[int]]  # indexed by row, then col
Box = Tuple[int, int]    # (row, col)


class Op(str, Enum):
    EQUALS = "="
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"

    @classmethod
    def parse(cls, symbol: str) -> "Op":
        try:
            return cls(symbol)
        except ValueError:
            raise ValueError(f"Unknown op: {symbol!r}") from None


@dataclass
class Cage:
    """A connected group of boxes sharing one arithmetic clue."""
    op: Op
    val: int
    boxes: List[Box] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "op": self.op.value,
            "val": self.val,
            "boxes": [[r, c] for r, c in self.boxes]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Cage":
        boxes = [(_whole_number(r, "row"), _whole_number(c, "column")) for r, c in data["boxes"]]
        if not boxes:
            raise ValueError("Cage has no boxes")
        if len(set(boxes)) != len(boxes):
            raise ValueError(f"Cage lists a box twice: {boxes}")
        val = _whole_number(data["val"], "value")
        if val < 0:
            raise ValueError(f"Cage value must not be negative: {val}")
        return cls(Op.parse(data["op"]), val, boxes)

    def evaluate(self, board: Board) -> bool:
        """
        Checks the clue against the board values at the boxes.
        For '-' and '/' any box may hold the minuend/dividend.
        """
        numbers = [board[r][c] for r, c in self.boxes]
        if self.op == Op.EQUALS:
            return len(numbers) == 1 and numbers[0] == self.val
        if self.op == Op.ADD:
            return sum(numbers) == self.val
        if self.op == Op.MULTIPLY:
            return prod(numbers) == self.val
        total = sum(numbers)
        product = prod(numbers)
        for n in numbers:
            if self.op == Op.SUBTRACT and n - (total - n) == self.val:
                return True
            if self.op == Op.DIVIDE and n * n == self.val * product:
                return True
        return False

    def __repr__(self):
        return f"{self.val}{self.op.value}{self.boxes}"


def _whole_number(value: Any, what: str) -> int:
    # bool is an int subclass, and int() would truncate floats
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Cage {what} must be a whole number, got {value!r}")
    return value


def transpose(board: Board) -> Board:
    return [list(col) for col in zip(*board)]


def make_board(max_value: int, shuffle_rounds: int = config.SHUFFLE_ROUNDS,
               rng: Optional[random.Random] = None) -> Board:
    """
    Builds a filled Latin square.
    Starts from the known board where each row is the previous one shifted once
    (1 2 3 / 2 3 1 / 3 1 2), then alternately swaps rows and columns.
    """
    if max_value < 1:
        raise ValueError(f"Board size must be positive, got {max_value}")
    rng = rng or random

    board = [[(row + col) % max_value + 1 for col in range(max_value)] for row in range(max_value)]
    if max_value == 1:
        return board

    for _ in range(shuffle_rounds):
        r1 = rng.randrange(max_value)
        r2 = rng.randrange(max_value - 1)
        if r2 >= r1:
            r2 += 1  # any row but r1
        board[r1], board[r2] = board[r2], board[r1]
        board = transpose(board)  # columns become rows and get swapped next time

    logger.debug(f"Generated {max_value}x{max_value} board after {shuffle_rounds} shuffles")
    return board


def is_latin_square(board: Board) -> bool:
    """Every row and every column must be a permutation of 1..N."""
    size = len(board)
    expected = set(range(1, size + 1))
    if any(len(row) != size for row in board):
        return False
    return all(set(row) == expected for row in board) and \
        all(set(col) == expected for col in zip(*board))


def format_board(board: Board) -> str:
    return "\n".join(" ".join(str(v) for v in row) for row in board)
