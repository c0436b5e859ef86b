"""Category selection shared by the bar chart and the cartogram.

An empty selection means "no filter": every category is shown as active.
Clicks move between the two modes differently per view, so the transitions
live here as plain functions of the current state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, Optional

SELECTED = "selected"
NOT_SELECTED = "not-selected"


class SelectionMode(Enum):
    UNFILTERED = "unfiltered"
    FILTERED = "filtered"


@dataclass(frozen=True)
class CategorySelection:
    categories: FrozenSet[str] = frozenset()

    @classmethod
    def of(cls, categories: Optional[Iterable[str]]) -> "CategorySelection":
        return cls(frozenset(categories or ()))

    @property
    def mode(self) -> SelectionMode:
        return SelectionMode.FILTERED if self.categories else SelectionMode.UNFILTERED

    def is_active(self, category: str) -> bool:
        return self.mode is SelectionMode.UNFILTERED or category in self.categories

    def toggled(self, category: str) -> FrozenSet[str]:
        """Bar chart click: start a fresh selection, or toggle membership."""
        if self.mode is SelectionMode.UNFILTERED:
            return frozenset({category})
        return self.categories ^ {category}

    def released(self, category: str) -> Optional[FrozenSet[str]]:
        """Cartogram click; ``None`` when the clicked circle is inert."""
        if self.mode is SelectionMode.UNFILTERED:
            return frozenset({category})
        if category not in self.categories:
            return None
        return self.categories - {category}


def highlight_class(selection: CategorySelection, category: str) -> str:
    if selection.mode is SelectionMode.UNFILTERED:
        return ""
    return SELECTED if category in selection.categories else NOT_SELECTED
