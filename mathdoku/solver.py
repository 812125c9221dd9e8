import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from itertools import combinations
from typing import List, Tuple, Dict, Set, Optional, Callable, FrozenSet

from . import config
from .arithmetic import PossibilityCache
from .board import Board, Cage, Op

logger = logging.getLogger("mathdoku_solver")

MIN_NUMBER = 1


class ContradictionError(RuntimeError):
    """A square ran out of candidates: the carving or a rule is broken."""


class SolveStatus(str, Enum):
    SOLVED = "solved"
    STUCK = "stuck"
    CONTRADICTION = "contradiction"


class SolvingCell:
    """
    Candidate set for one square, stored as a bit-set: bit v is set while v is
    still possible. `units` holds the indices of the row and column through it.
    """
    __slots__ = ("candidates", "units")

    def __init__(self, candidates: int, units: Tuple[int, int]):
        self.candidates = candidates
        self.units = units

    def copy(self) -> "SolvingCell":
        return SolvingCell(self.candidates, self.units)

    @property
    def size(self) -> int:
        return self.candidates.bit_count()

    def has(self, value: int) -> bool:
        return bool(self.candidates >> value & 1)

    def possibilities(self) -> List[int]:
        return [v for v in range(MIN_NUMBER, self.candidates.bit_length()) if self.candidates >> v & 1]

    def is_solved(self) -> Optional[int]:
        if self.size == 1:
            return self.candidates.bit_length() - 1
        return None

    def force(self, value: int):
        self.candidates = 1 << value

    def exclude(self, value: int):
        self.candidates &= ~(1 << value)

    def restrict(self, mask: int):
        self.candidates &= mask

    def other_unit(self, unit: int) -> int:
        row, col = self.units
        return col if unit == row else row

    def __repr__(self):
        return f"{{{','.join(map(str, self.possibilities()))}}}"


class SolvingCage:
    def __init__(self, op: Op, val: int, cells: Tuple[int, ...], units: FrozenSet[int]):
        self.op = op
        self.val = val
        self.cells = cells
        self.units = units  # every row/column touched by the cage


class SolvingBoard:
    """
    Live propagation model for one carving.
    Cells are stored by index (row * max + col); units (rows, then columns) and
    cages refer to cells by index, so a clone only has to copy the cells.
    """

    def __init__(self, max_value: int, cells: List[SolvingCell], units: List[Tuple[int, ...]],
                 cages: List[SolvingCage], cache: Optional[PossibilityCache] = None,
                 max_addition_size: int = config.MAX_ADDITION_SIZE,
                 max_group_size: int = config.MAX_GROUP_SIZE):
        self.max = max_value
        self.cells = cells
        self.units = units
        self.cages = cages
        self.cache = cache if cache is not None else PossibilityCache()
        self.max_addition_size = max_addition_size
        self.max_group_size = max_group_size

    @classmethod
    def from_cages(cls, max_value: int, cages: List[Cage], cache: Optional[PossibilityCache] = None,
                   **limits) -> "SolvingBoard":
        full = ((1 << max_value) - 1) << MIN_NUMBER
        cells = [
            SolvingCell(full, (row, max_value + col))
            for row in range(max_value) for col in range(max_value)
        ]
        rows = [tuple(row * max_value + col for col in range(max_value)) for row in range(max_value)]
        columns = [tuple(row * max_value + col for row in range(max_value)) for col in range(max_value)]

        solving_cages = []
        for cage in cages:
            indices = []
            for r, c in cage.boxes:
                if not (0 <= r < max_value and 0 <= c < max_value):
                    raise ValueError(f"Box {(r, c)} is outside a {max_value}x{max_value} board")
                indices.append(r * max_value + c)
            touched = frozenset(unit for index in indices for unit in cells[index].units)
            solving_cages.append(SolvingCage(cage.op, cage.val, tuple(indices), touched))

        return cls(max_value, cells, rows + columns, solving_cages, cache, **limits)

    @property
    def rows(self) -> List[Tuple[int, ...]]:
        return self.units[:self.max]

    @property
    def columns(self) -> List[Tuple[int, ...]]:
        return self.units[self.max:]

    @property
    def directions(self) -> List[range]:
        """Unit indices of the rows, then of the columns."""
        return [range(self.max), range(self.max, 2 * self.max)]

    def cell(self, row: int, col: int) -> SolvingCell:
        return self.cells[row * self.max + col]

    def clone(self) -> "SolvingBoard":
        return SolvingBoard(
            self.max, [cell.copy() for cell in self.cells], self.units, self.cages,
            self.cache, self.max_addition_size, self.max_group_size
        )

    def restrict_to(self, other: "SolvingBoard"):
        for cell, other_cell in zip(self.cells, other.cells):
            cell.restrict(other_cell.candidates)

    def shrinks(self, other: "SolvingBoard") -> bool:
        """Assumes other's candidates are subsets of ours."""
        return any(other_cell.size < cell.size for cell, other_cell in zip(self.cells, other.cells))

    def step(self) -> bool:
        """
        Runs one round of propagation.
        Every rule works on its own copy of the current board; a square keeps
        only the candidates that all rules left in place.
        Returns True if any candidate set shrank.
        """
        new_board = self.clone()
        for rule in RULES:
            rule_board = self.clone()
            rule(rule_board)
            new_board.restrict_to(rule_board)
        if not self.shrinks(new_board):
            return False
        self.restrict_to(new_board)
        return True

    def solve(self) -> int:
        """Propagates to a fixpoint and returns the number of rounds that changed something."""
        rounds = 0
        while self.step():
            rounds += 1
            logger.debug(f"Round {rounds}: {sum(self.candidate_counts())} candidates left")
            if self.no_possibilities():
                logger.debug(f"Contradiction after {rounds} rounds")
                break
        return rounds

    def candidate_counts(self) -> List[int]:
        return [cell.size for cell in self.cells]

    def is_solved(self) -> bool:
        return all(cell.size == 1 for cell in self.cells)

    def no_possibilities(self) -> bool:
        return any(cell.size == 0 for cell in self.cells)

    def has_conflict(self) -> bool:
        for unit in self.units:
            seen: Set[int] = set()
            for index in unit:
                value = self.cells[index].is_solved()
                if value is None:
                    continue
                if value in seen:
                    return True
                seen.add(value)
        return False

    def status(self) -> SolveStatus:
        if self.no_possibilities() or self.has_conflict():
            return SolveStatus.CONTRADICTION
        if self.is_solved():
            return SolveStatus.SOLVED
        return SolveStatus.STUCK

    def solution(self) -> Board:
        if not self.is_solved():
            raise ValueError(f"Board is not solved ({self.status().value})")
        return [[self.cell(r, c).is_solved() for c in range(self.max)] for r in range(self.max)]

    def __str__(self):
        max_value = self.max
        box_ops: Dict[int, str] = {}
        for cage in self.cages:
            for index in cage.cells:
                box_ops[index] = f"{cage.val}{cage.op.value}"

        possibility_chars = len(str(max_value))
        # want per_row * (chars + 1) ~= max / per_row
        per_row = math.ceil(math.sqrt(max_value / (possibility_chars + 1)))
        possibility_rows = math.ceil(max_value / per_row)
        cell_width = (possibility_chars + 1) * per_row + 1
        border_row = "+" + "+".join(["-" * cell_width] * max_value) + "+"

        lines = [border_row]
        for row in self.rows:
            row_lines = ["|"] * (1 + possibility_rows)
            for index in row:
                row_lines[0] += " " + box_ops.get(index, "").ljust(cell_width - 1) + "|"
                cell = self.cells[index]
                for i in range(possibility_rows):
                    values = []
                    for j in range(per_row):
                        value = i * per_row + j + 1
                        shown = str(value) if value <= max_value and cell.has(value) else ""
                        values.append(shown.rjust(possibility_chars))
                    row_lines[1 + i] += " " + " ".join(values) + " |"
            lines.extend(row_lines)
            lines.append(border_row)
        return "\n".join(lines)


# --- Propagation rules ---
# Each rule only removes candidates from the board it is given.

def _creates_conflict(board: SolvingBoard, cage: SolvingCage, possibility: Tuple[int, ...]) -> bool:
    assigned = dict(zip(cage.cells, possibility))
    for unit in cage.units:
        seen: Set[int] = set()
        for index in board.units[unit]:
            value = assigned.get(index)
            if value is None:
                value = board.cells[index].is_solved()
            if value is None:
                continue
            if value in seen:
                return True
            seen.add(value)
    return False


def arithmetic_rule(board: SolvingBoard):
    """Keeps only the values that appear in some arithmetic solution of each cage."""
    for cage in board.cages:
        if cage.op in (Op.ADD, Op.SUBTRACT) and len(cage.cells) > board.max_addition_size:
            continue
        cells = [board.cells[index] for index in cage.cells]
        allowed = [0] * len(cells)
        for possibility in board.cache.possibilities(cage.op, cage.val, board.max, len(cells)):
            if not all(cell.has(value) for cell, value in zip(cells, possibility)):
                continue
            if _creates_conflict(board, cage, possibility):
                continue
            for i, value in enumerate(possibility):
                allowed[i] |= 1 << value
        for cell, mask in zip(cells, allowed):
            cell.restrict(mask)


def unique_position_rule(board: SolvingBoard):
    """A value that fits in only one square of a unit must go there."""
    for unit in board.units:
        holders: Dict[int, List[int]] = defaultdict(list)
        for index in unit:
            for value in board.cells[index].possibilities():
                holders[value].append(index)
        for value, indices in holders.items():
            if len(indices) == 1:
                board.cells[indices[0]].force(value)


def isolated_group_rule(board: SolvingBoard):
    """
    If g squares of a unit share at most g candidates between them, no other
    square of the unit can take those values.
    """
    to_exclude: Dict[int, int] = defaultdict(int)
    for unit in board.units:
        max_size = min(board.max_group_size, len(unit) - 1)
        for group_size in range(1, max_size + 1):
            for group in combinations(unit, group_size):
                union = 0
                for index in group:
                    union |= board.cells[index].candidates
                if union.bit_count() > group_size:
                    continue
                for index in unit:
                    if index not in group:
                        to_exclude[index] |= union
    # Applied afterwards so an exclusion can't form a new group within the same pass
    for index, mask in to_exclude.items():
        board.cells[index].restrict(~mask)


def cross_unit_rule(board: SolvingBoard):
    """
    If the squares that can hold v in g rows all lie in the same g columns,
    v can't go anywhere else in those columns (and the same with rows and
    columns swapped).
    """
    for value in range(MIN_NUMBER, board.max + 1):
        to_exclude: Set[int] = set()
        for direction in board.directions:
            unit_crosses = []
            for unit in direction:
                crosses = frozenset(
                    board.cells[index].other_unit(unit)
                    for index in board.units[unit]
                    if board.cells[index].has(value)
                )
                unit_crosses.append((unit, crosses))

            max_size = min(board.max_group_size, len(unit_crosses) - 1)
            for group_size in range(2, max_size + 1):
                for group in combinations(unit_crosses, group_size):
                    group_units = {unit for unit, _ in group}
                    cross_union = frozenset().union(*(crosses for _, crosses in group))
                    if len(cross_union) > group_size:
                        continue
                    for cross_unit in cross_union:
                        for index in board.units[cross_unit]:
                            if board.cells[index].other_unit(cross_unit) not in group_units:
                                to_exclude.add(index)
        # See isolated_group_rule for why exclusions wait
        for index in to_exclude:
            board.cells[index].exclude(value)


RULES: List[Callable[[SolvingBoard], None]] = [
    arithmetic_rule,
    unique_position_rule,
    isolated_group_rule,
    cross_unit_rule,
]


@dataclass
class SolveResult:
    rounds: int
    status: SolveStatus
    solution: Optional[Board] = None

    @property
    def solved(self) -> bool:
        return self.status == SolveStatus.SOLVED


def solve_puzzle(max_value: int, cages: List[Cage], cache: Optional[PossibilityCache] = None) -> SolveResult:
    board = SolvingBoard.from_cages(max_value, cages, cache)
    rounds = board.solve()
    status = board.status()
    solution = board.solution() if status == SolveStatus.SOLVED else None
    return SolveResult(rounds, status, solution)
