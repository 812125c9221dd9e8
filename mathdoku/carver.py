import random
import logging
from bisect import insort
from collections import deque
from math import prod
from typing import List, Tuple, Set, Optional

from . import config
from .board import Board, Box, Cage, Op

logger = logging.getLogger("mathdoku_carver")

DIRS = [(1, 0), (-1, 0), (0, 1), (0, -1)]
# Can be used for any cage of size > 1 ('-' and '/' are not always possible)
ALWAYS_POSSIBLE_OPS = [Op.ADD, Op.MULTIPLY]


def make_cage_size(rng=random, min_size: float = config.MIN_CAGE_SIZE,
                   max_size: float = config.MAX_CAGE_SIZE) -> int:
    return round(min_size + rng.random() * (max_size - min_size))


def choose_operation(numbers: List[int], rng=random,
                     div_prob: float = config.DIV_PROB,
                     minus_prob: float = config.MINUS_PROB) -> Tuple[Op, int]:
    """
    Picks the clue for a cage holding `numbers`.
    '/' and '-' are rarer, so they are tried first when they give a valid value.
    """
    if len(numbers) == 1:
        return Op.EQUALS, numbers[0]

    max_number = max(numbers)
    total = sum(numbers)
    product = prod(numbers)
    max_minus = 2 * max_number - total  # max minus all the others
    max_div, remainder = divmod(max_number * max_number, product)  # max divided by all the others

    if remainder == 0 and max_div > 0 and rng.random() < div_prob:
        return Op.DIVIDE, max_div
    if max_minus > 0 and rng.random() < minus_prob:
        return Op.SUBTRACT, max_minus

    op = rng.choice(ALWAYS_POSSIBLE_OPS)
    if op == Op.ADD:
        return op, total
    return op, product


def _neighbors(box: Box, size: int, allowed: Set[Box]) -> List[Box]:
    r, c = box
    result = []
    for dr, dc in DIRS:
        nr, nc = r + dr, c + dc
        if 0 <= nr < size and 0 <= nc < size and (nr, nc) in allowed:
            result.append((nr, nc))
    return result


def _grow_cage(region: List[Box], cage_size: int, size: int, rng) -> List[Box]:
    """Partial random search from a random start until the cage is full or boxed in."""
    region_set = set(region)
    start = rng.choice(region)
    cage: List[Box] = []
    frontier = [start]
    marked = {start}  # cage + frontier
    while len(cage) < cage_size and frontier:
        box = frontier.pop(rng.randrange(len(frontier)))
        cage.append(box)
        for neighbor in _neighbors(box, size, region_set):
            if neighbor not in marked:
                marked.add(neighbor)
                frontier.append(neighbor)
    return cage


def _split_regions(remaining: Set[Box], size: int) -> List[List[Box]]:
    """Connected components of the remaining boxes (BFS over 4-adjacency)."""
    components = []
    visited: Set[Box] = set()
    for start in sorted(remaining):
        if start in visited:
            continue
        component = []
        q = deque([start])
        visited.add(start)
        while q:
            curr = q.popleft()
            component.append(curr)
            for neighbor in _neighbors(curr, size, remaining):
                if neighbor not in visited:
                    visited.add(neighbor)
                    q.append(neighbor)
        components.append(component)
    return components


def make_cages(board: Board, rng: Optional[random.Random] = None) -> List[Cage]:
    """
    Partitions the board into connected cages.
    The largest unallocated region is always carved next, and whatever is left
    of it is split back into connected regions.
    """
    rng = rng or random
    size = len(board)
    full_grid = [(r, c) for r in range(size) for c in range(size)]
    unallocated_regions: List[List[Box]] = [full_grid] if full_grid else []  # sorted by size
    cages: List[Cage] = []

    while unallocated_regions:
        region = unallocated_regions.pop()
        cage_size = make_cage_size(rng)
        boxes = _grow_cage(region, cage_size, size, rng)

        op, val = choose_operation([board[r][c] for r, c in boxes], rng)
        cages.append(Cage(op, val, boxes))

        remaining = set(region).difference(boxes)
        for component in _split_regions(remaining, size):
            insort(unallocated_regions, component, key=len)

    logger.debug(f"Carved {len(cages)} cages from {size}x{size} board")
    return cages
