import logging
from typing import List, Dict, Any, Optional

from reportlab.pdfgen import canvas
from reportlab.lib.pagesizes import A4, A5
from reportlab.lib import colors
from reportlab.lib.units import mm

from . import config
from .board import Board, Cage
from .generator import classify
from .render import cage_lookup, cage_borders, clue_label

logger = logging.getLogger("mathdoku_book")

# --- LAYOUT ---
MARGIN_X = 10 * mm
MARGIN_Y = 10 * mm
DIVIDER_Y = 55 * mm  # Height of the solution footer area

# Fonts - "Classic Book" style
FONT_TITLE = "Times-Bold"      # For "Puzzle #1"
FONT_SERIF = "Times-Roman"     # For general text
FONT_ITALIC = "Times-Italic"   # For "Difficulty" label
FONT_SANS = "Helvetica-Bold"   # For clues (Clarity)
FONT_HAND = "Helvetica"        # For solution numbers

LEVELS = {
    "very_easy": {"num": 1, "label": "VERY EASY", "color": colors.Color(0.2, 0.8, 0.2)},
    "easy": {"num": 2, "label": "EASY", "color": colors.Color(0.1, 0.6, 0.1)},
    "medium": {"num": 3, "label": "MEDIUM", "color": colors.Color(0.9, 0.7, 0.1)},
    "hard": {"num": 4, "label": "HARD", "color": colors.Color(0.8, 0.1, 0.1)},
}


def draw_diamond(c, x, y, size, filled=True):
    """Draws a diamond shape centered at x,y."""
    half = size / 2
    p = c.beginPath()
    p.moveTo(x, y + half)
    p.lineTo(x + half, y)
    p.lineTo(x, y - half)
    p.lineTo(x - half, y)
    p.close()

    c.setLineWidth(0.5)
    c.setStrokeColor(colors.black)
    if filled:
        c.setFillColor(colors.black)
        c.drawPath(p, fill=1, stroke=0)
    else:
        c.setFillColor(colors.white)
        c.drawPath(p, fill=0, stroke=1)


def draw_difficulty_badge(c, right_x, top_y, rounds: int):
    """
    Top-right difficulty indicator:
       Solving rounds: 5   (Small, Italic)
       [●] MEDIUM          (Bold, with colored circle)
       ♦ ♦ ♦ ♢             (Visual Meter)
    """
    level = LEVELS[classify(rounds)]
    display_name = level["label"]

    c.setFillColor(colors.black)
    c.setFont(FONT_ITALIC, 8)
    c.drawRightString(right_x, top_y, f"Solving rounds: {rounds}")

    c.setFont(FONT_TITLE, 14)
    name_w = c.stringWidth(display_name, FONT_TITLE, 14)
    circle_radius = 2.5 * mm
    circle_x = right_x - name_w - 4 * mm - circle_radius
    circle_y = top_y - 14 + 4

    c.setFillColor(level["color"])
    c.setStrokeColor(colors.black)
    c.setLineWidth(0.5)
    c.circle(circle_x, circle_y, circle_radius, fill=1, stroke=1)

    c.setFillColor(colors.black)
    c.drawRightString(right_x, top_y - 14, display_name)

    diamond_size = 4 * mm
    spacing = 1 * mm
    total_width = (4 * diamond_size) + (3 * spacing)
    start_x = right_x - total_width + (diamond_size / 2)
    diamond_y = top_y - 24
    for i in range(1, 5):
        cx = start_x + ((i - 1) * (diamond_size + spacing))
        draw_diamond(c, cx, diamond_y, diamond_size, filled=i <= level["num"])


def draw_cage_grid(c, max_value: int, cages: List[Cage], start_x, top_y, cell_size,
                   solution: Optional[Board] = None, show_clues: bool = True):
    """Draws the grid with thick cage outlines; start_x/top_y is the top-left corner."""
    lookup = cage_lookup(cages)
    labels = {min(cage.boxes): clue_label(cage) for cage in cages}

    # Thin inner lines first so the outlines are drawn on top
    c.setStrokeColor(colors.grey)
    c.setLineWidth(0.4)
    for r in range(max_value):
        for col in range(max_value):
            c.rect(start_x + col * cell_size, top_y - (r + 1) * cell_size, cell_size, cell_size, fill=0, stroke=1)

    c.setStrokeColor(colors.black)
    c.setLineWidth(2.0 if show_clues else 1.0)
    for r in range(max_value):
        for col in range(max_value):
            left = start_x + col * cell_size
            right = left + cell_size
            top = top_y - r * cell_size
            bottom = top - cell_size
            for side in cage_borders(lookup, max_value, r, col):
                if side == "top":
                    c.line(left, top, right, top)
                elif side == "bottom":
                    c.line(left, bottom, right, bottom)
                elif side == "left":
                    c.line(left, top, left, bottom)
                else:
                    c.line(right, top, right, bottom)

            if show_clues and (r, col) in labels:
                c.setFillColor(colors.black)
                c.setFont(FONT_SANS, cell_size / 4.5)
                c.drawString(left + cell_size * 0.08, top - cell_size * 0.25, labels[(r, col)])

            if solution is not None:
                c.setFillColor(colors.black)
                c.setFont(FONT_HAND, cell_size / 1.8)
                c.drawCentredString(left + cell_size / 2, bottom + cell_size * 0.25, str(solution[r][col]))


def draw_puzzle_on_page(c, p_data: Dict[str, Any], puzzle_num: int, page_width=A5[0], page_height=A5[1]):
    """Draws a single puzzle and its solution footer on a canvas of given size."""
    max_value = p_data["max"]
    cages = p_data["cages"]
    solution = p_data.get("solution")

    # --- 1. HEADER ---
    draw_difficulty_badge(c, page_width - 2 * MARGIN_X, page_height - MARGIN_Y, p_data.get("rounds", 0))

    title_text = f"PUZZLE  {puzzle_num}"
    c.setFont(FONT_TITLE, 22)
    title_w = c.stringWidth(title_text, FONT_TITLE, 22)
    box_w = title_w + 10 * mm
    box_h = 14 * mm
    box_x = MARGIN_X
    box_y = page_height - MARGIN_Y - box_h - 2 * mm

    c.setFillColor(colors.black)
    c.rect(box_x, box_y, box_w, box_h, fill=1, stroke=0)
    c.setFillColor(colors.white)
    c.drawCentredString(box_x + box_w / 2, box_y + 4 * mm, title_text)

    # --- 2. MAIN PUZZLE ---
    area_top_y = box_y - 10 * mm
    area_bottom_y = DIVIDER_Y + 5 * mm
    area_w = page_width - (2 * MARGIN_X)
    area_h = area_top_y - area_bottom_y

    cell_size = min(area_w, area_h) / max_value
    board_size = max_value * cell_size
    px_offset = MARGIN_X + (area_w - board_size) / 2
    py_offset = area_bottom_y + (area_h - board_size) / 2 + board_size
    draw_cage_grid(c, max_value, cages, px_offset, py_offset, cell_size)

    # --- 3. SOLUTION FOOTER ---
    c.setFillColor(colors.Color(0.95, 0.95, 0.95))
    c.rect(0, 0, page_width, DIVIDER_Y, fill=1, stroke=0)
    c.setStrokeColor(colors.black)
    c.setLineWidth(1)
    c.line(0, DIVIDER_Y, page_width, DIVIDER_Y)

    text_y_center = DIVIDER_Y / 2
    c.setFillColor(colors.black)
    c.setFont(FONT_TITLE, 14)
    c.drawString(MARGIN_X + 5 * mm, text_y_center + 10, "SOLUTION")
    c.setFont(FONT_SERIF, 11)
    c.drawString(MARGIN_X + 5 * mm, text_y_center - 5, f"Puzzle #{puzzle_num}")

    if solution is not None:
        # Upside down, like the answers in the back of a puzzle book
        grid_size = 35 * mm
        small_cell = grid_size / max_value
        c.saveState()
        c.translate(page_width / 2, (DIVIDER_Y - grid_size) / 2)
        c.rotate(180)
        draw_cage_grid(c, max_value, cages, -grid_size / 2, 0, small_cell,
                       solution=solution, show_clues=False)
        c.restoreState()

    c.setFillColor(colors.black)
    c.setFont(FONT_SERIF, 9)
    c.drawCentredString(page_width / 2, 5 * mm, str(puzzle_num))


def generate_pdf(puzzles: List[Dict[str, Any]], file_obj=None, puzzles_per_page: int = 1):
    """
    Generates a PDF book from a list of puzzle dictionaries
    ({"max", "cages", "rounds", optional "solution"}).
    """
    output_dest = file_obj if file_obj else config.PDF_FILE
    page_size = A4 if puzzles_per_page == 2 else A5

    c = canvas.Canvas(output_dest, pagesize=page_size)
    c.setTitle("Mathdoku Puzzle Book")
    page_w, page_h = page_size

    if puzzles_per_page == 1:
        for i, p_data in enumerate(puzzles):
            draw_puzzle_on_page(c, p_data, i + 1, page_w, page_h)
            c.showPage()
    else:
        # Each A5 page is rotated 90 degrees to fill half of the A4 page
        for i in range(0, len(puzzles), 2):
            c.saveState()
            c.translate(0, page_h)
            c.rotate(-90)
            draw_puzzle_on_page(c, puzzles[i], i + 1, page_h / 2, page_w)
            c.restoreState()

            if i + 1 < len(puzzles):
                c.saveState()
                c.translate(0, page_h / 2)
                c.rotate(-90)
                draw_puzzle_on_page(c, puzzles[i + 1], i + 2, page_h / 2, page_w)
                c.restoreState()

            c.showPage()

    c.save()
    if not file_obj:
        logger.info(f"PDF saved to {config.PDF_FILE}")
    return puzzles
