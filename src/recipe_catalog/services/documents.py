"""Rich-text document helpers.

Recipe text fields are stored as JSON document trees: a ``doc`` root holding
``paragraph``, ``heading``, ``bulletList``/``orderedList`` and ``listItem``
nodes, with inline ``text`` nodes carrying optional ``bold``, ``italic`` and
``link`` marks, plus ``hardBreak``.
"""

import html
import json
from collections.abc import Iterable, Mapping
from uuid import UUID

from recipe_catalog.domain.recipes import IngredientRow

EMPTY_DOCUMENT = '{"type":"doc","content":[]}'

_BULLET_LIST_OPEN = '<ul class="list-disc list-inside space-y-1 my-2">'
_ORDERED_LIST_OPEN = '<ol class="list-decimal list-inside space-y-1 my-2">'
_LIST_PREFIX = "- "
_BULLET_MARKERS = ("-", "•")
_MAX_HEADING_LEVEL = 6


def render_html(content: str | None) -> str:
    """Render a stored document to HTML.

    Content that is not valid JSON, or nests too deeply to walk, is treated as
    HTML and returned unchanged.
    """
    if not content:
        return ""
    try:
        return render_node(json.loads(content))
    except (ValueError, RecursionError):
        return content


def render_node(node: object) -> str:  # noqa: PLR0911
    """Render a single document node and its children."""
    if not isinstance(node, Mapping):
        return ""
    node_type = node.get("type")

    if node_type == "text":
        return _render_text(node)
    if node_type == "hardBreak":
        return "<br/>"

    content = node.get("content")
    if not isinstance(content, list):
        return ""
    if node_type == "doc":
        return _render_root(content)

    children = "".join(render_node(child) for child in content)
    attrs = _attrs(node)
    if node_type == "paragraph":
        return f"<p>{children}</p>" if children else "<p><br/></p>"
    if node_type == "heading":
        level = _heading_level(attrs.get("level"))
        return f'<h{level} class="font-semibold mt-6 mb-2">{children}</h{level}>'
    if node_type == "bulletList":
        return f"{_BULLET_LIST_OPEN}{children}</ul>"
    if node_type == "orderedList":
        return f"{_ORDERED_LIST_OPEN}{children}</ol>"
    if node_type == "listItem":
        return f'<li class="ml-4">{children}</li>'
    if node_type == "link":
        href = _escape_attr(attrs.get("href") or "#")
        return (
            f'<a href="{href}" class="text-blue-600 underline '
            f'hover:text-blue-800">{children}</a>'
        )
    return children


def _render_text(node: Mapping) -> str:
    result = html.escape(str(node.get("text") or ""), quote=True)
    marks = node.get("marks")
    if not isinstance(marks, list):
        marks = []
    # Last mark is innermost.
    for mark in reversed(marks):
        mark_type = mark.get("type") if isinstance(mark, Mapping) else None
        if mark_type == "bold":
            result = f"<strong>{result}</strong>"
        elif mark_type == "italic":
            result = f"<em>{result}</em>"
        elif mark_type == "link":
            href = _escape_attr(_attrs(mark).get("href") or "#")
            result = f'<a href="{href}" class="text-blue-600 underline">{result}</a>'
    return result


def _render_root(nodes: list) -> str:
    """Render root nodes, regrouping "- " paragraphs into bullet lists."""
    parts: list[str] = []
    pending: list[dict[str, object]] = []

    def flush() -> None:
        if pending:
            items = "".join(render_node(item) for item in pending)
            parts.append(f"{_BULLET_LIST_OPEN}{items}</ul>")
            pending.clear()

    for node in nodes:
        item = _as_list_item(node)
        if item is not None:
            pending.append(item)
            continue
        flush()
        parts.append(render_node(node))
    flush()
    return "".join(parts)


def _as_list_item(node: object) -> dict[str, object] | None:
    """Return a listItem for a paragraph whose text starts with "- "."""
    if not isinstance(node, Mapping) or node.get("type") != "paragraph":
        return None
    content = node.get("content")
    if not isinstance(content, list) or not content:
        return None
    first = content[0]
    if not isinstance(first, Mapping) or first.get("type") != "text":
        return None
    text = str(first.get("text") or "").strip()
    if not text.startswith(_LIST_PREFIX):
        return None
    stripped = {**first, "text": text[len(_LIST_PREFIX) :]}
    return {
        "type": "listItem",
        "content": [{"type": "paragraph", "content": [stripped, *content[1:]]}],
    }


def _escape_attr(value: object) -> str:
    return html.escape(str(value), quote=True)


def _attrs(node: Mapping) -> Mapping:
    attrs = node.get("attrs")
    return attrs if isinstance(attrs, Mapping) else {}


def _heading_level(raw: object) -> int:
    if isinstance(raw, int) and not isinstance(raw, bool):
        if 1 <= raw <= _MAX_HEADING_LEVEL:
            return raw
    return 2


def plain_text_to_document(text: str | None) -> str:
    """Convert plain text to a document with one paragraph per non-empty line."""
    if not text or not text.strip():
        return EMPTY_DOCUMENT
    paragraphs = []
    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed:
            continue
        if trimmed.startswith(_BULLET_MARKERS):
            trimmed = trimmed[1:].strip()
        paragraphs.append(_paragraph(trimmed))
    return dump_document(paragraphs)


def ensure_document(content: str | None) -> str:
    """Return content as a document JSON string.

    Valid JSON documents pass through untouched; anything else is treated as
    plain text.
    """
    if not content or not content.strip():
        return EMPTY_DOCUMENT
    if content.strip().startswith("{"):
        try:
            json.loads(content)
        except (ValueError, RecursionError):
            pass
        else:
            return content
    return plain_text_to_document(content)


def structured_ingredients_document(
    rows: Iterable[IngredientRow], tag_names: Mapping[UUID, str]
) -> str:
    """Build a document listing "quantity tag notes" for each ingredient row."""
    paragraphs = []
    for row in rows:
        parts = []
        if row.quantity.strip():
            parts.append(row.quantity.strip())
        if row.tag_id and row.tag_id in tag_names:
            parts.append(tag_names[row.tag_id])
        if row.notes.strip():
            parts.append(row.notes.strip())
        line = " ".join(parts)
        if line.strip():
            paragraphs.append(_paragraph(line))
    if not paragraphs:
        paragraphs.append({"type": "paragraph", "content": []})
    return dump_document(paragraphs)


def dump_document(blocks: list[dict[str, object]]) -> str:
    """Serialize root blocks into a compact document JSON string."""
    return json.dumps(
        {"type": "doc", "content": blocks},
        ensure_ascii=False,
        separators=(",", ":"),
    )


def _paragraph(text: str) -> dict[str, object]:
    if not text:
        return {"type": "paragraph", "content": []}
    return {"type": "paragraph", "content": [{"type": "text", "text": text}]}
