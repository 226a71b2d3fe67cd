from __future__ import annotations

from typing import Callable, Optional, Sequence

from ...domain.models import Container, Leaf, LeafNode, MarkupNode, RenderedContent

PUNCTUATION_TEXT = {
    "non_identifiable_sign_multi": "…",
    "non_identifiable_sign_single": "x",
    "word_boundary_separator": " . ",
}
ALTERNATIVE_KINDS = {"choice", "corr", "sic"}
SEGMENT_KINDS = {"part", "seg"}

# Lays out a parent's children as a decorated span tree, scoped to that parent.
ChildNester = Callable[[Leaf, Sequence[Leaf]], Sequence[MarkupNode]]


class LeafRendererService:
    """Default sign renderer keyed by leaf kind.

    With a ``nest`` hook, the damage/unclear runs among a leaf's children are
    wrapped and delimited inside the parent's span. Without it, children are
    rendered flat.
    """

    def __init__(self, nest: Optional[ChildNester] = None) -> None:
        self._nest = nest

    def render(self, leaf: Leaf) -> RenderedContent | None:
        kind = leaf.kind
        if kind == "pc":
            return self._render_punctuation(leaf)
        if kind == "g":
            return self._render_glyph(leaf)
        if kind in ALTERNATIVE_KINDS:
            return RenderedContent(css_class=kind, children=self._render_children(leaf))
        if kind in SEGMENT_KINDS:
            attributes: list[tuple[str, str]] = [("id", leaf.id)]
            if kind == "seg":
                attributes.extend([("onmouseover", ""), ("onmouseout", "")])
            return RenderedContent(css_class=kind, attributes=tuple(attributes), children=self._render_children(leaf))
        return None

    __call__ = render

    @staticmethod
    def _render_punctuation(leaf: Leaf) -> RenderedContent | None:
        text = PUNCTUATION_TEXT.get(str(leaf.payload.get("subtype") or ""))
        if text is None:
            return None
        return RenderedContent(css_class="scribal", text=text)

    @staticmethod
    def _render_glyph(leaf: Leaf) -> RenderedContent:
        text = str(leaf.payload.get("text") or "") + str(leaf.payload.get("whitespace") or "")
        attributes: tuple[tuple[str, str], ...] = ()
        element_id = leaf.payload.get("id")
        if element_id:
            attributes = (("id", str(element_id)),)
        children: tuple[RenderedContent, ...] = ()
        if leaf.payload.get("cert") == "low":
            children = (RenderedContent(css_class="tei", children=(RenderedContent(css_class="super", text="?"),)),)
        return RenderedContent(css_class="g", text=text, attributes=attributes, children=children)

    def _render_children(self, leaf: Leaf) -> tuple[RenderedContent, ...]:
        if not leaf.children:
            return ()
        if self._nest is None:
            rendered = (self.render(child) for child in leaf.children)
            return tuple(item for item in rendered if item is not None)
        return self._flatten(self._nest(leaf, leaf.children))

    def _flatten(self, nodes: Sequence[MarkupNode]) -> tuple[RenderedContent, ...]:
        items: list[RenderedContent] = []
        for node in nodes:
            if isinstance(node, LeafNode):
                if node.content is not None:
                    items.append(node.content)
                continue
            items.append(self._decoration(node))
        return tuple(items)

    def _decoration(self, node: Container) -> RenderedContent:
        children: list[RenderedContent] = []
        if node.open_delimiter:
            children.append(RenderedContent(css_class="tei", text=node.open_delimiter))
        children.extend(self._flatten(node.children))
        if node.close_delimiter:
            children.append(RenderedContent(css_class="tei", text=node.close_delimiter))
        return RenderedContent(css_class=node.dimension.value, children=tuple(children))
