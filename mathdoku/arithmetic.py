from typing import Dict, List, Tuple

from .board import Op

MIN_NUMBER = 1

Possibility = Tuple[int, ...]
QueryKey = Tuple[Op, int, int, int]


class PossibilityCache:
    """
    Memoizes the value tuples that satisfy a cage's arithmetic.
    Keyed on (op, val, max_value, boxes); entries are pure functions of the
    key, so the cache only grows and can be shared by every solve of a run.
    """

    def __init__(self):
        self._results: Dict[QueryKey, List[Possibility]] = {}

    def __len__(self):
        return len(self._results)

    def __contains__(self, key: QueryKey) -> bool:
        return key in self._results

    def possibilities(self, op: Op, val: int, max_value: int, boxes: int) -> List[Possibility]:
        key = (Op(op), val, max_value, boxes)
        possibilities = self._results.get(key)
        if possibilities is None:
            possibilities = self._enumerate(*key)
            self._results[key] = possibilities
        return possibilities

    def _enumerate(self, op: Op, val: int, max_value: int, boxes: int) -> List[Possibility]:
        if boxes < 1:
            raise ValueError(f"No boxes for {op.value}{val}")
        if boxes == 1:
            return [(val,)] if MIN_NUMBER <= val <= max_value else []

        possibilities: List[Possibility] = []
        if op == Op.ADD:
            for chosen in range(MIN_NUMBER, min(max_value, val - 1) + 1):
                possibilities.extend(
                    (chosen,) + others
                    for others in self.possibilities(Op.ADD, val - chosen, max_value, boxes - 1)
                )
        elif op == Op.MULTIPLY:
            for chosen in range(MIN_NUMBER, min(max_value, val) + 1):
                if val % chosen:
                    continue
                possibilities.extend(
                    (chosen,) + others
                    for others in self.possibilities(Op.MULTIPLY, val // chosen, max_value, boxes - 1)
                )
        elif op == Op.SUBTRACT:
            # In A - B - C this box holds either A...
            for chosen in range(max(val + 1, MIN_NUMBER), max_value + 1):
                possibilities.extend(
                    (chosen,) + others
                    for others in self.possibilities(Op.ADD, chosen - val, max_value, boxes - 1)
                )
            # ...or one of B, C
            for chosen in range(MIN_NUMBER, max_value + 1):
                possibilities.extend(
                    (chosen,) + others
                    for others in self.possibilities(Op.SUBTRACT, val + chosen, max_value, boxes - 1)
                )
        elif op == Op.DIVIDE:
            # In A / B / C this box holds either A...
            for chosen in range(val, max_value + 1) if val >= MIN_NUMBER else ():
                if chosen % val:
                    continue
                possibilities.extend(
                    (chosen,) + others
                    for others in self.possibilities(Op.MULTIPLY, chosen // val, max_value, boxes - 1)
                )
            # ...or one of B, C
            for chosen in range(MIN_NUMBER, max_value + 1):
                possibilities.extend(
                    (chosen,) + others
                    for others in self.possibilities(Op.DIVIDE, val * chosen, max_value, boxes - 1)
                )
        else:
            raise ValueError(f"Unknown op for {boxes} boxes: {op.value}")

        # A / B = 1 is reachable from both branches
        return list(dict.fromkeys(possibilities))
