"""
Configuration settings for the Mathdoku Generator.
Tuning constants for board shuffling, cage carving and the solver, plus
output locations. Every value can be overridden from the environment or a
local .env file.
"""

import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

# Board generation
# Number of times to swap rows (then transpose) when shuffling the canonical board
SHUFFLE_ROUNDS = int(os.getenv("MATHDOKU_SHUFFLE_ROUNDS", "100000"))

# Cage carving
# Cage sizes are round(uniform(MIN, MAX)): size-1 and size-5 cages are rarer
MIN_CAGE_SIZE = float(os.getenv("MATHDOKU_MIN_CAGE_SIZE", "1.05"))
MAX_CAGE_SIZE = float(os.getenv("MATHDOKU_MAX_CAGE_SIZE", "4.7"))
DIV_PROB = float(os.getenv("MATHDOKU_DIV_PROB", "0.5"))      # chance of '/' when possible
MINUS_PROB = float(os.getenv("MATHDOKU_MINUS_PROB", "0.5"))  # chance of '-' when possible and '/' not chosen

# Solver
# '+' and '-' cages larger than this are skipped by the arithmetic rule
MAX_ADDITION_SIZE = int(os.getenv("MATHDOKU_MAX_ADDITION_SIZE", "4"))
# Largest group of cells/units considered by the isolated-group and cross-unit rules
MAX_GROUP_SIZE = int(os.getenv("MATHDOKU_MAX_GROUP_SIZE", "4"))

# Difficulty labels by solving rounds: rounds <= threshold gets the label
DIFFICULTY_LEVELS = ["very_easy", "easy", "medium", "hard"]
DIFFICULTY_ROUND_THRESHOLDS = (3, 6, 10)

# Output locations
CAGINGS_DIR = os.getenv("MATHDOKU_CAGINGS_DIR", "cagings")
SOLUTION_FILE = os.getenv("MATHDOKU_SOLUTION_FILE", "solution.json")
PUZZLE_FILE = os.getenv("MATHDOKU_PUZZLE_FILE", "puzzle.html")
PDF_FILE = os.getenv("MATHDOKU_PDF_FILE", "mathdoku_book.pdf")

# Logging
LOG_FILE: Optional[str] = os.getenv("MATHDOKU_LOG_FILE")
LOG_LEVEL = os.getenv("MATHDOKU_LOG_LEVEL", "INFO")
