"""Context text built from elements for LLM prompts.

build_element_context describes one element for a mini-spark.
build_elements_summary digests a whole idea for the system prompt; its size
stays roughly bounded however many elements the idea has: the 10 most recent
keep up to 300 chars each, older ones are cut to 80.
"""
from datetime import datetime, timezone
from functools import cmp_to_key
from typing import Any, Mapping, Optional, Protocol, Sequence

from spark.thinking.metadata import resolve_url

MAX_RECENT_ELEMENTS = 10
MAX_CONTENT_LENGTH = 300
MAX_OLDER_CONTENT_LENGTH = 80
MAX_NOTE_LENGTH = 100


class SummarizableElement(Protocol):
    type: str
    source: str
    content: Optional[str]
    metadata: Mapping[str, Any]
    created_at: Optional[str]


def build_element_context(
    content: Optional[str],
    element_type: str,
    metadata: Optional[Mapping[str, Any]],
    url: Optional[str],
    filename: str,
) -> str:
    """Flat text block for one element: content, URL, title, description, file."""
    metadata = metadata or {}
    is_attachment = element_type in ("file", "image")

    lines = [
        content or "",
        f"URL: {url}" if url else "",
        f"Title: {metadata['title']}" if metadata.get("title") else "",
        f"Description: {metadata['description']}" if metadata.get("description") else "",
        f"File: {filename}" if is_attachment else "",
    ]
    return "\n".join(line for line in lines if line)


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _newest_first(a: SummarizableElement, b: SummarizableElement) -> int:
    # Elements without a timestamp compare equal to everything
    ta = _parse_timestamp(getattr(a, "created_at", None))
    tb = _parse_timestamp(getattr(b, "created_at", None))
    if ta is None or tb is None:
        return 0
    if ta > tb:
        return -1
    if ta < tb:
        return 1
    return 0


def _truncate(text: str, limit: int) -> str:
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def _summary_content(element: SummarizableElement) -> str:
    metadata = element.metadata or {}

    title = metadata.get("title")
    if title:
        content = str(title)
    else:
        content = element.content or ""

    description = metadata.get("description")
    if description and str(description) not in content:
        content = f"{content} — {description}" if content else str(description)

    if not content:
        content = resolve_url(metadata) or ""
    if not content:
        # Only a real filename here, not the "File" placeholder
        content = metadata.get("filename") or metadata.get("file_name") or ""

    return content


def build_elements_summary(elements: Sequence[SummarizableElement]) -> str:
    """Digest of an idea's elements, most recent first.

    Returns "" for an empty collection.
    """
    if not elements:
        return ""

    ordered = sorted(elements, key=cmp_to_key(_newest_first))

    lines: list[str] = []
    for index, element in enumerate(ordered):
        prefix = "[spark]" if element.source == "ai" else f"[{element.type}]"
        content = _summary_content(element)

        if index >= MAX_RECENT_ELEMENTS:
            content = _truncate(content, MAX_OLDER_CONTENT_LENGTH)
        else:
            content = _truncate(content, MAX_CONTENT_LENGTH)

        note = (element.metadata or {}).get("note")
        if note:
            content += f' [user note: "{_truncate(str(note), MAX_NOTE_LENGTH)}"]'

        lines.append(f"{prefix} {content}")

    if len(elements) > MAX_RECENT_ELEMENTS:
        older_count = len(elements) - MAX_RECENT_ELEMENTS
        lines.insert(
            MAX_RECENT_ELEMENTS,
            f"\n[...{older_count} earlier elements, summarized...]",
        )

    return "\n".join(lines)
