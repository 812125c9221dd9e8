import os
import json
import shutil
import logging
from typing import List, Dict, Tuple, Any

from . import config
from .board import Board, Cage, is_latin_square

logger = logging.getLogger("mathdoku_storage")


def save_solution(board: Board, filepath: str = config.SOLUTION_FILE):
    """Stores the filled board as one flat list, row after row."""
    with open(filepath, "w") as f:
        json.dump([v for row in board for v in row], f)
    logger.info(f"Saved solution to {filepath}")


def load_solution(filepath: str = config.SOLUTION_FILE) -> Board:
    with open(filepath, "r") as f:
        values = json.load(f)
    if not isinstance(values, list) or not values:
        raise ValueError(f"{filepath}: solution must be a non-empty list of values")
    size = round(len(values) ** 0.5)
    if size * size != len(values):
        raise ValueError(f"{filepath}: {len(values)} values do not make a square board")
    board = [values[r * size:(r + 1) * size] for r in range(size)]
    if not is_latin_square(board):
        raise ValueError(f"{filepath}: solution is not a Latin square")
    return board


def reset_cagings_dir(cagings_dir: str = config.CAGINGS_DIR):
    """Removes cagings of a previous run; they belong to a different board."""
    if os.path.exists(cagings_dir):
        shutil.rmtree(cagings_dir)
    os.makedirs(cagings_dir)


def puzzle_to_dict(max_value: int, cages: List[Cage]) -> Dict[str, Any]:
    return {"max": max_value, "cages": [cage.to_dict() for cage in cages]}


def save_caging(cagings_dir: str, rounds: int, index: int, max_value: int, cages: List[Cage]) -> str:
    """Writes a caging to <cagings_dir>/<rounds>/<index>.json and returns the path."""
    caging_dir = os.path.join(cagings_dir, str(rounds))
    os.makedirs(caging_dir, exist_ok=True)
    filepath = os.path.join(caging_dir, f"{index}.json")
    with open(filepath, "w") as f:
        json.dump(puzzle_to_dict(max_value, cages), f, indent=4)
    return filepath


def load_puzzle(filepath: str) -> Tuple[int, List[Cage]]:
    with open(filepath, "r") as f:
        data = json.load(f)
    try:
        max_value = int(data["max"])
        cages = [Cage.from_dict(cage) for cage in data["cages"]]
    except (KeyError, TypeError) as e:
        raise ValueError(f"{filepath}: malformed puzzle ({e})") from e
    return max_value, cages


def list_cagings(cagings_dir: str = config.CAGINGS_DIR) -> List[Dict]:
    """Metadata for every saved caging, easiest (fewest rounds) first."""
    cagings = []
    if not os.path.isdir(cagings_dir):
        return cagings
    for rounds_name in os.listdir(cagings_dir):
        rounds_dir = os.path.join(cagings_dir, rounds_name)
        if not (rounds_name.isdigit() and os.path.isdir(rounds_dir)):
            continue
        for filename in os.listdir(rounds_dir):
            if not filename.endswith(".json"):
                continue
            filepath = os.path.join(rounds_dir, filename)
            stem = os.path.splitext(filename)[0]
            try:
                with open(filepath, "r") as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Error reading {filepath}: {e}")
                continue
            cagings.append({
                "path": filepath,
                "rounds": int(rounds_name),
                "index": int(stem) if stem.isdigit() else None,
                "max": data.get("max"),
                "cages": len(data.get("cages", []))
            })
    cagings.sort(key=lambda c: (c["rounds"], c["index"] if c["index"] is not None else -1))
    return cagings
