from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Iterator

VIEW_IDS = (1, 2, 3, 4, 5, 6)
DEFAULT_VIEWS = (1, 2, 3, 5)
PANELS_PER_ROW = 2


def panel_position(rank: int, total: int) -> tuple[int, int]:
    """1-based (row, column) of the rank-th panel in a two-column grid."""
    if not 1 <= rank <= total:
        raise ValueError(f"Panel rank {rank} is outside 1..{total}")
    row = math.ceil(rank / PANELS_PER_ROW)
    column = PANELS_PER_ROW if rank % PANELS_PER_ROW == 0 else rank % PANELS_PER_ROW
    return row, column


def grid_rows(total: int) -> int:
    if total <= 1:
        return 1
    return math.ceil(total / PANELS_PER_ROW)


@dataclass(frozen=True)
class ViewSelection:
    """Sanitized set of diagnostic views: deduplicated, clipped to 1..6, sorted."""

    views: tuple[int, ...] = DEFAULT_VIEWS

    @classmethod
    def from_values(cls, values: Iterable[Any] | int | None) -> "ViewSelection":
        if values is None:
            return cls()
        if isinstance(values, int):
            values = [values]
        kept: set[int] = set()
        for value in values:
            try:
                number = float(value)
            except (TypeError, ValueError):
                continue
            if not number.is_integer():
                continue
            view = int(number)
            if view in VIEW_IDS:
                kept.add(view)
        return cls(views=tuple(sorted(kept)))

    def __iter__(self) -> Iterator[int]:
        return iter(self.views)

    def __len__(self) -> int:
        return len(self.views)

    def __contains__(self, view: object) -> bool:
        return view in self.views

    @property
    def rows(self) -> int:
        return grid_rows(len(self.views))

    def position(self, view: int) -> tuple[int, int]:
        if view not in self.views:
            raise KeyError(f"View {view} is not selected")
        return panel_position(self.views.index(view) + 1, len(self.views))
