from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any

from ..domain.models import Container, EditionMarkup, LeafNode, LineMarkup, MarkupNode, RenderedContent
from .ids import IdGenerator

XHTML_NS = "http://www.w3.org/1999/xhtml"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


def _element(parent: ET.Element, tag: str, attrib: dict[str, str] | None = None, text: str | None = None) -> ET.Element:
    elem = ET.SubElement(parent, tag, attrib or {})
    if text is not None:
        elem.text = text
    return elem


class HtmlSerializer:
    """Serializes rendered editions to the XHTML facsimile layout."""

    def __init__(self, *, stylesheet_href: str = "../css/styles.css", id_generator: IdGenerator | None = None) -> None:
        self.stylesheet_href = stylesheet_href
        self._ids = id_generator or IdGenerator()

    def serialize(self, edition: EditionMarkup) -> str:
        html = ET.Element("html", {"xmlns": XHTML_NS, "lang": "en-US"})
        self._make_header(html, edition.title)
        body = _element(html, "body")
        column_counter = 0
        for surface_number, surface in enumerate(edition.surfaces, start=1):
            facsimile = _element(body, "div", {"class": "facsimile section", "id": f"facs_{surface_number}"})
            surface_elem = _element(facsimile, "div", {"class": "surface"})
            for column in surface:
                column_counter += 1
                column_elem = _element(
                    surface_elem,
                    "div",
                    {"class": "column", "data-n": str(column_counter), "id": f"column_{column_counter}"},
                )
                for line in column:
                    self.append_line(column_elem, line)
        return XML_DECLARATION + ET.tostring(html, encoding="unicode", method="xml")

    def _make_header(self, html: ET.Element, title: str) -> None:
        head = _element(html, "head")
        _element(head, "meta", {"content": "text/html; charset=UTF-8", "http-equiv": "Content-Type"})
        _element(head, "title", text=title or "Graph to HTML")
        _element(head, "link", {"href": self.stylesheet_href, "rel": "stylesheet"})

    def append_line(self, parent: ET.Element, line: LineMarkup) -> ET.Element:
        container = _element(parent, "div", {"class": "line-container"})
        line_elem = _element(container, "div", {"class": "line"})
        _element(line_elem, "span", {"class": "line-nr explicit"}, line.n)
        line_body = _element(line_elem, "span", {"class": "line-body"})
        for node in line.children:
            self._append_node(line_body, node)
        if line.notes:
            self._append_notes(container, line_elem, line.notes)
        return container

    def _append_node(self, parent: ET.Element, node: MarkupNode) -> None:
        if isinstance(node, LeafNode):
            if node.content is not None:
                self._append_content(parent, node.content)
            return
        span = _element(parent, "span", {"class": node.dimension.value})
        if node.open_delimiter:
            _element(span, "span", {"class": "tei"}, node.open_delimiter)
        for child in node.children:
            self._append_node(span, child)
        if node.close_delimiter:
            _element(span, "span", {"class": "tei"}, node.close_delimiter)

    def _append_content(self, parent: ET.Element, content: RenderedContent) -> None:
        attrib = {"class": content.css_class}
        attrib.update(dict(content.attributes))
        elem = _element(parent, "span", attrib, content.text or None)
        for child in content.children:
            self._append_content(elem, child)

    def _append_notes(self, container: ET.Element, line_elem: ET.Element, notes: tuple[str, ...]) -> None:
        input_id = self._ids.next_id()
        _element(line_elem, "label", {"class": "notes-icon", "for": input_id})
        _element(line_elem, "input", {"id": input_id, "onchange": "", "type": "checkbox"})
        notes_container = _element(container, "div", {"class": "notes-container"})
        ul = _element(notes_container, "ul")
        for note in notes:
            li = _element(ul, "li", {"class": "note-item"})
            _element(li, "button")
            _element(li, "input", {"id": self._ids.next_id(), "type": "checkbox"})
            _element(li, "span", {"class": "note-text"}, note)


def tree_to_dict(node: MarkupNode | LineMarkup) -> dict[str, Any]:
    """JSON-ready dump of a line tree, used for artifacts and tree-shape comparisons."""
    if isinstance(node, LineMarkup):
        return {
            "line_id": node.line_id,
            "n": node.n,
            "leaf_count": node.leaf_count,
            "steps": node.steps,
            "splits": node.splits,
            "children": [tree_to_dict(child) for child in node.children],
        }
    if isinstance(node, Container):
        label = node.label.value if hasattr(node.label, "value") else node.label
        return {
            "dimension": node.dimension.value,
            "label": label,
            "open": node.open_delimiter,
            "close": node.close_delimiter,
            "children": [tree_to_dict(child) for child in node.children],
        }
    return {"leaf": node.leaf.id, "index": node.leaf.index}
