from .html_serializer import HtmlSerializer, tree_to_dict
from .ids import IdGenerator
from .io import discover_edition_exports, load_edition, read_json, write_json, write_jsonl, write_text

__all__ = [
    "HtmlSerializer",
    "IdGenerator",
    "discover_edition_exports",
    "load_edition",
    "read_json",
    "tree_to_dict",
    "write_json",
    "write_jsonl",
    "write_text",
]
