from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Union


class DamageLevel(str, Enum):
    LOW = "low"
    OTHER = "other"

    @classmethod
    def from_marker(cls, marker: str | None) -> DamageLevel | None:
        """Collapse a raw damage marker from the export into a damage level."""
        if marker is None:
            return None
        value = str(marker).strip().lower()
        if not value:
            return None
        return cls.LOW if value == "low" else cls.OTHER


class Dimension(str, Enum):
    DAMAGE = "damage"
    UNCLEAR = "unclear"

    def label_of(self, leaf: Leaf) -> DamageLevel | bool | None:
        if self is Dimension.DAMAGE:
            return leaf.damage
        return leaf.unclear


Label = Union[DamageLevel, bool, None]


def is_annotated(label: Label) -> bool:
    """True for a non-null damage level or a true unclear flag."""
    return label is not None and label is not False


@dataclass(frozen=True)
class Leaf:
    id: str
    index: int
    damage: DamageLevel | None = None
    unclear: bool = False
    kind: str = "g"
    payload: Mapping[str, Any] = field(default_factory=dict, hash=False)
    children: tuple[Leaf, ...] = ()
    end_index: int | None = None
    descendant_flag: bool = False

    @property
    def has_descendant_content(self) -> bool:
        return self.descendant_flag or bool(self.children)

    @property
    def last_index(self) -> int:
        # Descendants occupy the indices right after their parent.
        if self.end_index is not None:
            return max(self.index, self.end_index)
        if self.children:
            return max(self.index, max(child.last_index for child in self.children))
        return self.index

    def walk(self):
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(frozen=True)
class Run:
    dimension: Dimension
    label: Label
    start: int
    leaves: tuple[Leaf, ...]

    def __post_init__(self) -> None:
        if not self.leaves:
            raise ValueError("A run must hold at least one leaf")

    def __len__(self) -> int:
        return len(self.leaves)

    @property
    def stop(self) -> int:
        return self.start + len(self.leaves)

    @property
    def first(self) -> Leaf:
        return self.leaves[0]

    @property
    def last(self) -> Leaf:
        return self.leaves[-1]

    def split(self, size: int) -> tuple[Run, Run]:
        """Return a leading run of exactly ``size`` leaves and the trailing remainder."""
        if not 0 < size < len(self.leaves):
            raise ValueError(f"Cannot split a run of {len(self.leaves)} leaves at {size}")
        head = Run(self.dimension, self.label, self.start, self.leaves[:size])
        tail = Run(self.dimension, self.label, self.start + size, self.leaves[size:])
        return head, tail


@dataclass(frozen=True)
class Partition:
    dimension: Dimension
    runs: tuple[Run, ...]

    @property
    def size(self) -> int:
        return sum(len(run) for run in self.runs)

    def leaves(self) -> tuple[Leaf, ...]:
        return tuple(leaf for run in self.runs for leaf in run.leaves)


@dataclass(frozen=True)
class MergeStep:
    outer_dimension: Dimension
    outer_label: Label
    inner_dimension: Dimension
    inner_runs: tuple[Run, ...]
    outer_run: Run

    @property
    def leaves(self) -> tuple[Leaf, ...]:
        return tuple(leaf for run in self.inner_runs for leaf in run.leaves)


@dataclass(frozen=True)
class RenderedContent:
    css_class: str
    text: str = ""
    attributes: tuple[tuple[str, str], ...] = ()
    children: tuple[RenderedContent, ...] = ()


@dataclass(frozen=True)
class LeafNode:
    leaf: Leaf
    content: RenderedContent | None


@dataclass(frozen=True)
class Container:
    dimension: Dimension
    label: Label
    children: tuple[MarkupNode, ...]
    open_delimiter: str | None = None
    close_delimiter: str | None = None


MarkupNode = Union[Container, LeafNode]


@dataclass(frozen=True)
class Line:
    id: str
    n: str
    leaves: tuple[Leaf, ...]
    notes: tuple[str, ...] = ()


@dataclass(frozen=True)
class Column:
    lines: tuple[Line, ...]


@dataclass(frozen=True)
class Surface:
    columns: tuple[Column, ...]


@dataclass(frozen=True)
class Edition:
    title: str
    surfaces: tuple[Surface, ...]
    source_path: str | None = None

    def lines(self) -> list[Line]:
        return [line for surface in self.surfaces for column in surface.columns for line in column.lines]


@dataclass(frozen=True)
class LineMarkup:
    line_id: str
    n: str
    children: tuple[MarkupNode, ...]
    leaf_count: int
    steps: int
    splits: int
    notes: tuple[str, ...] = ()


@dataclass(frozen=True)
class EditionMarkup:
    title: str
    surfaces: tuple[tuple[tuple[LineMarkup, ...], ...], ...]

    def lines(self) -> list[LineMarkup]:
        return [line for surface in self.surfaces for column in surface for line in column]
