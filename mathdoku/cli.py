import argparse
import logging
import random
import sys
from typing import List, Optional

from . import config
from . import storage
from .board import Board, format_board
from .book import generate_pdf
from .generator import PuzzleGenerator
from .render import write_html
from .solver import SolvingBoard

logger = logging.getLogger("mathdoku_cli")

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = config.LOG_LEVEL, log_file: Optional[str] = config.LOG_FILE):
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    # Clear existing handlers to avoid duplicates when called twice
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='a')
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(file_handler)


def cmd_generate(args) -> int:
    rng = random.Random(args.seed) if args.seed is not None else None
    generator = PuzzleGenerator(args.size, shuffle_rounds=args.shuffle_rounds, rng=rng,
                                max_attempts=args.max_attempts)
    storage.save_solution(generator.board, args.solution_file)
    storage.reset_cagings_dir(args.cagings_dir)

    for caging in generator.generate(args.count):
        index = generator.stats.counts[caging.rounds]
        path = storage.save_caging(args.cagings_dir, caging.rounds, index, args.size, caging.cages)
        logger.info(f"Saved {caging.difficulty} caging to {path}")
    logger.info(generator.stats.summary())
    return 0


def cmd_solve(args) -> int:
    max_value, cages = storage.load_puzzle(args.puzzle)
    board = SolvingBoard.from_cages(max_value, cages)
    rounds = board.solve()
    print(board)
    print(f"Status: {board.status().value} after {rounds} rounds")
    return 0


def load_matching_solution(solution_file: Optional[str], max_value: int, puzzle: str) -> Optional[Board]:
    if not solution_file:
        return None
    solution = storage.load_solution(solution_file)
    if len(solution) != max_value:
        raise ValueError(f"{solution_file}: {len(solution)}x{len(solution)} solution "
                         f"does not fit {max_value}x{max_value} puzzle {puzzle}")
    return solution


def cmd_render(args) -> int:
    max_value, cages = storage.load_puzzle(args.puzzle)
    solution = load_matching_solution(args.solution_file, max_value, args.puzzle)
    path = write_html(max_value, cages, solution, args.out)
    logger.info(f"Rendered puzzle to {path}")
    return 0


def cmd_book(args) -> int:
    puzzles = []
    for path in args.puzzles:
        max_value, cages = storage.load_puzzle(path)
        solution = load_matching_solution(args.solution_file, max_value, path)
        board = SolvingBoard.from_cages(max_value, cages)
        puzzles.append({"max": max_value, "cages": cages, "rounds": board.solve(), "solution": solution})
    generate_pdf(puzzles, args.out, puzzles_per_page=args.per_page)
    logger.info(f"Saved {len(puzzles)} puzzles to {args.out}")
    return 0


def cmd_show_solution(args) -> int:
    print(format_board(storage.load_solution(args.solution_file)))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mathdoku", description="Mathdoku puzzle generator")
    parser.add_argument("--log-level", default=config.LOG_LEVEL)
    parser.add_argument("--log-file", default=config.LOG_FILE)
    subparsers = parser.add_subparsers(dest="command", required=True)

    gen = subparsers.add_parser("generate", help="Fill a board, then save uniquely solvable cagings")
    gen.add_argument("size", type=int)
    gen.add_argument("--count", type=int, default=None, help="Stop after this many cagings (default: run forever)")
    gen.add_argument("--shuffle-rounds", type=int, default=config.SHUFFLE_ROUNDS)
    gen.add_argument("--seed", type=int, default=None)
    gen.add_argument("--max-attempts", type=int, default=None, help="Carvings to try per caging before giving up")
    gen.add_argument("--cagings-dir", default=config.CAGINGS_DIR)
    gen.add_argument("--solution-file", default=config.SOLUTION_FILE)
    gen.set_defaults(func=cmd_generate)

    solve = subparsers.add_parser("solve", help="Run the propagation solver on a saved caging")
    solve.add_argument("puzzle")
    solve.set_defaults(func=cmd_solve)

    render = subparsers.add_parser("render", help="Render a saved caging as HTML")
    render.add_argument("puzzle")
    render.add_argument("--solution-file", default=None, help="Solution to hide behind the reveal checkbox")
    render.add_argument("--out", default=config.PUZZLE_FILE)
    render.set_defaults(func=cmd_render)

    book = subparsers.add_parser("book", help="Render saved cagings as a PDF book")
    book.add_argument("puzzles", nargs="+")
    book.add_argument("--solution-file", default=None, help="Solution to print in each page footer")
    book.add_argument("--out", default=config.PDF_FILE)
    book.add_argument("--per-page", type=int, choices=[1, 2], default=1)
    book.set_defaults(func=cmd_book)

    show = subparsers.add_parser("show-solution", help="Print the saved solution board")
    show.add_argument("--solution-file", default=config.SOLUTION_FILE)
    show.set_defaults(func=cmd_show_solution)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, args.log_file)

    if getattr(args, "size", 1) < 1:
        parser.error("size must be positive")

    try:
        return args.func(args)
    except (ValueError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
