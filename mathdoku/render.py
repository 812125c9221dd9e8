"""
HTML rendering of a single puzzle.
Cage outlines are solid, inner box borders dashed; the clue sits in the
top-left box of each cage. The solution is hidden until the checkbox is ticked.
"""

from html import escape
from typing import List, Dict, Optional

from . import config
from .board import Board, Box, Cage, Op

STYLE = [
    "table{position:relative;top:10px;border-collapse:collapse}",
    "td{position:relative;width:50px;height:50px;border:1.5px dashed black;font-family:Arial,Helvetica,sans-serif}",
    "td.top{border-top:2px solid black}",
    "td.left{border-left:2px solid black}",
    "td.right{border-right:2px solid black}",
    "td.bottom{border-bottom:2px solid black}",
    "span.op{position:absolute;top:0;font-size:12px}",
    "span.value{display:none;position:absolute;top:10px;left:16px;font-size:28px}",
    "input:checked~table span.value{display:block}",
]


def clue_label(cage: Cage) -> str:
    return str(cage.val) if cage.op == Op.EQUALS else f"{cage.val}{cage.op.value}"


def cage_lookup(cages: List[Cage]) -> Dict[Box, int]:
    """Box -> index of the cage holding it."""
    return {box: i for i, cage in enumerate(cages) for box in cage.boxes}


def cage_borders(lookup: Dict[Box, int], max_value: int, r: int, c: int) -> List[str]:
    """Sides of box (r, c) that lie on its cage's outline."""
    this_cage = lookup.get((r, c))
    borders = []
    if r == 0 or lookup.get((r - 1, c)) != this_cage:
        borders.append("top")
    if c == 0 or lookup.get((r, c - 1)) != this_cage:
        borders.append("left")
    if c == max_value - 1 or lookup.get((r, c + 1)) != this_cage:
        borders.append("right")
    if r == max_value - 1 or lookup.get((r + 1, c)) != this_cage:
        borders.append("bottom")
    return borders


def render_html(max_value: int, cages: List[Cage], solution: Optional[Board] = None) -> str:
    lookup = cage_lookup(cages)
    labels = {min(cage.boxes): clue_label(cage) for cage in cages}

    out = ["<head><style>", *STYLE, "</style></head>", "<body>"]
    if solution is not None:
        out.append("Show solutions<input type=checkbox>")
    out.append("<table>")
    for r in range(max_value):
        out.append("<tr>")
        for c in range(max_value):
            borders = cage_borders(lookup, max_value, r, c)
            out.append("<td")
            if borders:
                out.append(' class="' + " ".join(borders) + '"')
            out.append(">")
            label = labels.get((r, c))
            if label:
                out.extend(["<span class=op>", escape(label), "</span>"])
            if solution is not None:
                out.extend(["<span class=value>", str(solution[r][c]), "</span>"])
            out.append("</td>")
        out.append("</tr>")
    out.append("</table>")
    out.append("</body>")
    return "".join(out)


def write_html(max_value: int, cages: List[Cage], solution: Optional[Board] = None,
               filepath: str = config.PUZZLE_FILE) -> str:
    with open(filepath, "w", encoding="utf-8") as f:
        f.write(render_html(max_value, cages, solution))
    return filepath
