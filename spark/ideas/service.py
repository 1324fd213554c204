"""Idea and element operations behind the web routes and the CLI.

Every mutation builds a new Idea/Element and hands it to the DAO; the
dataclasses themselves are never modified in place.
"""
import logging
import re
from dataclasses import replace
from typing import Any, Optional

from spark.app.config import get_settings
from spark.ingest.url_meta import fetch_url_meta, get_domain
from spark.storage.dao import (
    ELEMENT_SOURCES,
    ELEMENT_TYPES,
    IDEA_STATUSES,
    Element,
    ElementDAO,
    Idea,
    IdeaDAO,
    new_id,
    utc_now,
)

logger = logging.getLogger("spark.ideas")

_URL_PATTERN = re.compile(r"^(https?://|www\.)", re.IGNORECASE)


class IdeaNotFoundError(LookupError):
    pass


class ElementNotFoundError(LookupError):
    pass


class ActiveIdeaLimitError(ValueError):
    pass


def _get_idea(idea_id: str) -> Idea:
    idea = IdeaDAO().find_by_id(idea_id)
    if idea is None:
        raise IdeaNotFoundError(f"Idea not found: {idea_id}")
    return idea


def _get_element(element_id: str) -> Element:
    element = ElementDAO().find_by_id(element_id)
    if element is None:
        raise ElementNotFoundError(f"Element not found: {element_id}")
    return element


def _check_active_limit() -> None:
    limit = get_settings().max_active_ideas
    if IdeaDAO().count_active() >= limit:
        raise ActiveIdeaLimitError(
            f"You can have up to {limit} active Ideas. Archive one to make room."
        )


# ── Ideas ───────────────────────────────────────────────────────


def create_idea(title: str) -> Idea:
    title = title.strip()
    if not title:
        raise ValueError("Idea title must not be empty")
    _check_active_limit()

    dao = IdeaDAO()
    now = utc_now()
    idea = Idea(
        id=new_id(),
        title=title,
        created_at=now,
        updated_at=now,
        sort_order=dao.next_sort_order(),
    )
    dao.insert(idea)
    logger.info("Created idea %s", idea.id)
    return idea


def get_idea(idea_id: str) -> Idea:
    return _get_idea(idea_id)


def list_ideas(status: Optional[str] = "active") -> list[Idea]:
    if status is not None and status not in IDEA_STATUSES:
        raise ValueError(f"Unknown idea status: {status}")
    return IdeaDAO().find_all(status=status)


def update_title(idea_id: str, title: str) -> Idea:
    title = title.strip()
    if not title:
        raise ValueError("Idea title must not be empty")
    updated = replace(_get_idea(idea_id), title=title, updated_at=utc_now())
    IdeaDAO().update(updated)
    return updated


def update_thinking(idea_id: str, thinking: str) -> Idea:
    now = utc_now()
    updated = replace(
        _get_idea(idea_id),
        current_thinking=thinking,
        current_thinking_updated_at=now,
        updated_at=now,
    )
    IdeaDAO().update(updated)
    return updated


def archive_idea(idea_id: str) -> Idea:
    updated = replace(_get_idea(idea_id), status="archived", updated_at=utc_now())
    IdeaDAO().update(updated)
    logger.info("Archived idea %s", idea_id)
    return updated


def unarchive_idea(idea_id: str) -> Idea:
    idea = _get_idea(idea_id)
    if idea.status == "active":
        return idea
    _check_active_limit()
    updated = replace(idea, status="active", updated_at=utc_now())
    IdeaDAO().update(updated)
    logger.info("Unarchived idea %s", idea_id)
    return updated


def delete_idea(idea_id: str) -> None:
    """Permanently delete an idea and all of its elements."""
    _get_idea(idea_id)
    removed = ElementDAO().delete_by_idea(idea_id)
    IdeaDAO().delete(idea_id)
    logger.info("Deleted idea %s and %d elements", idea_id, removed)


# ── Elements ────────────────────────────────────────────────────


def is_url(text: str) -> bool:
    return bool(_URL_PATTERN.match(text.strip()))


def _new_element(
    element_type: str,
    idea_id: Optional[str],
    content: Optional[str] = None,
    metadata: Optional[dict[str, Any]] = None,
    source: str = "user",
) -> Element:
    if element_type not in ELEMENT_TYPES:
        raise ValueError(f"Unknown element type: {element_type}")
    if source not in ELEMENT_SOURCES:
        raise ValueError(f"Unknown element source: {source}")
    if idea_id is not None:
        _get_idea(idea_id)
    element = Element(
        id=new_id(),
        type=element_type,
        created_at=utc_now(),
        idea_id=idea_id,
        source=source,
        content=content,
        metadata=metadata or {},
    )
    ElementDAO().insert(element)
    return element


def quick_add(
    text: str,
    idea_id: Optional[str] = None,
    drawer: bool = False,
    fetch_preview: bool = True,
) -> Element:
    """Capture typed or pasted text.

    Links become article elements (with a link preview when one can be
    fetched); anything else is stored as a thought.
    """
    text = text.strip()
    if not text:
        raise ValueError("Nothing to add")

    base_meta: dict[str, Any] = {"drawer": True} if drawer and idea_id is None else {}

    if not is_url(text):
        return _new_element("thought", idea_id, content=text, metadata=base_meta)

    url = text if text.lower().startswith("http") else f"https://{text}"
    metadata = {**base_meta, "url": url, "domain": get_domain(text)}
    element = _new_element("article", idea_id, metadata=metadata)

    if not fetch_preview:
        return element

    meta = fetch_url_meta(url)
    if meta.title or meta.description:
        element = replace(
            element,
            metadata={**element.metadata, "title": meta.title, "description": meta.description},
        )
        ElementDAO().update(element)
    return element


def add_file(
    url: str,
    filename: str,
    file_type: Optional[str] = None,
    idea_id: Optional[str] = None,
    storage_path: Optional[str] = None,
    drawer: bool = False,
) -> Element:
    """Record an uploaded file or image by its public URL."""
    element_type = "image" if (file_type or "").startswith("image/") else "file"
    metadata: dict[str, Any] = {"url": url, "filename": filename}
    if file_type:
        metadata["file_type"] = file_type
    if storage_path:
        metadata["storage_path"] = storage_path
    if drawer and idea_id is None:
        metadata["drawer"] = True
    return _new_element(element_type, idea_id, metadata=metadata)


def get_element(element_id: str) -> Element:
    return _get_element(element_id)


def list_elements(idea_id: str, archived: bool = False) -> list[Element]:
    _get_idea(idea_id)
    return ElementDAO().find_by_idea(idea_id, archived=archived)


def list_inbox() -> list[Element]:
    return ElementDAO().find_unfiled(drawer=False)


def list_drawer() -> list[Element]:
    return ElementDAO().find_unfiled(drawer=True)


def _update_metadata(element_id: str, **changes: Any) -> Element:
    """Apply metadata changes; a value of None removes the key."""
    element = _get_element(element_id)
    metadata = dict(element.metadata)
    for key, value in changes.items():
        if value is None:
            metadata.pop(key, None)
        else:
            metadata[key] = value
    updated = replace(element, metadata=metadata)
    ElementDAO().update(updated)
    return updated


def set_note(element_id: str, note: str) -> Element:
    return _update_metadata(element_id, note=note.strip() or None)


def edit_content(element_id: str, content: str) -> Element:
    content = content.strip()
    if not content:
        raise ValueError("Content must not be empty")
    updated = replace(_get_element(element_id), content=content)
    ElementDAO().update(updated)
    return updated


def archive_element(element_id: str) -> Element:
    updated = replace(_get_element(element_id), is_archived=True)
    ElementDAO().update(updated)
    return updated


def unarchive_element(element_id: str) -> Element:
    updated = replace(_get_element(element_id), is_archived=False)
    ElementDAO().update(updated)
    return updated


def move_element(element_id: str, idea_id: str) -> Element:
    """File an element under an idea, taking it out of the Inbox/Drawer."""
    _get_idea(idea_id)
    element = _get_element(element_id)
    metadata = {k: v for k, v in element.metadata.items() if k != "drawer"}
    updated = replace(element, idea_id=idea_id, metadata=metadata)
    ElementDAO().update(updated)
    logger.info("Moved element %s to idea %s", element_id, idea_id)
    return updated


def move_to_drawer(element_id: str) -> Element:
    """Send an Inbox item to the Drawer."""
    element = _get_element(element_id)
    if element.idea_id is not None:
        raise ValueError("Only unfiled elements can go to the Drawer")
    updated = replace(element, metadata={**element.metadata, "drawer": True})
    ElementDAO().update(updated)
    return updated


def delete_element(element_id: str) -> None:
    _get_element(element_id)
    ElementDAO().delete(element_id)
