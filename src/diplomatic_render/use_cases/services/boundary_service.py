from __future__ import annotations

from typing import Callable, Iterable, Optional

from ...domain.errors import PartitionMismatchError
from ...domain.models import DamageLevel, Dimension, Label, Leaf, Run, is_annotated

AdjacencyOracle = Callable[[str, int], Optional[Leaf]]

DELIMITERS: dict[tuple[Dimension, Label], tuple[str, str]] = {
    (Dimension.DAMAGE, DamageLevel.LOW): ("⸢", "⸣"),
    (Dimension.DAMAGE, DamageLevel.OTHER): ("[", "]"),
    (Dimension.UNCLEAR, True): ("(", ")"),
}


class LineIndex:
    """Read-only ``(line_id, index) -> Leaf`` lookup precomputed once per line.

    Descendant indices resolve to the top-level sign that holds them, so a
    neighbour is always compared at the level the run itself lives on.
    """

    def __init__(self) -> None:
        self._by_key: dict[tuple[str, int], Leaf] = {}

    @classmethod
    def from_leaves(cls, line_id: str, leaves: Iterable[Leaf]) -> LineIndex:
        index = cls()
        index.add_line(line_id, leaves)
        return index

    def add_line(self, line_id: str, leaves: Iterable[Leaf]) -> None:
        for leaf in leaves:
            for node in leaf.walk():
                key = (line_id, node.index)
                if key in self._by_key:
                    raise PartitionMismatchError(
                        f"Line {line_id!r} holds two leaves at index {node.index}: {self._by_key[key].id!r} and {node.id!r}"
                    )
                self._by_key[key] = leaf

    def __call__(self, line_id: str, index: int) -> Leaf | None:
        return self._by_key.get((line_id, index))

    def __len__(self) -> int:
        return len(self._by_key)


class BoundaryService:
    """Decides whether a run draws its opening and closing delimiter glyphs."""

    def __init__(self, oracle: AdjacencyOracle, line_id: str) -> None:
        self._oracle = oracle
        self.line_id = line_id

    def continues_before(self, run: Run) -> bool:
        neighbor = self._oracle(self.line_id, run.first.index - 1)
        return neighbor is not None and run.dimension.label_of(neighbor) == run.label

    def continues_after(self, run: Run) -> bool:
        neighbor = self._oracle(self.line_id, run.last.last_index + 1)
        return neighbor is not None and run.dimension.label_of(neighbor) == run.label

    def delimiters(self, run: Run) -> tuple[str | None, str | None]:
        if not is_annotated(run.label):
            return None, None
        if len(run) == 1 and run.first.has_descendant_content:
            # Nested content draws its own boundaries.
            return None, None
        glyphs = DELIMITERS[(run.dimension, run.label)]
        opening = None if self.continues_before(run) else glyphs[0]
        closing = None if self.continues_after(run) else glyphs[1]
        return opening, closing
