"""Data Access Objects for ideas and elements."""
import json
import sqlite3
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from spark.storage.db import transaction
from spark.thinking.metadata import normalize_metadata

IDEA_STATUSES = ("active", "archived")
ELEMENT_TYPES = ("thought", "article", "image", "file", "scout", "spark")
ELEMENT_SOURCES = ("user", "ai")


def new_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Idea:
    id: str
    title: str
    created_at: str
    updated_at: str
    current_thinking: Optional[str] = None
    current_thinking_updated_at: Optional[str] = None
    status: str = "active"
    sort_order: int = 0


@dataclass(frozen=True)
class Element:
    id: str
    type: str
    created_at: str
    idea_id: Optional[str] = None
    source: str = "user"
    content: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    is_archived: bool = False


def _row_to_element(row: sqlite3.Row) -> Element:
    data = dict(row)
    raw = data.pop("metadata") or "{}"
    return Element(
        **{k: v for k, v in data.items() if k != "is_archived"},
        metadata=normalize_metadata(json.loads(raw)),
        is_archived=bool(data["is_archived"]),
    )


class IdeaDAO:
    def insert(self, idea: Idea) -> None:
        with transaction() as conn:
            conn.execute(
                """INSERT INTO ideas
                   (id, title, current_thinking, current_thinking_updated_at,
                    status, sort_order, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (idea.id, idea.title, idea.current_thinking,
                 idea.current_thinking_updated_at, idea.status,
                 idea.sort_order, idea.created_at, idea.updated_at),
            )

    def update(self, idea: Idea) -> None:
        """Replace the stored row with a new Idea object (immutable pattern)."""
        with transaction() as conn:
            conn.execute(
                """UPDATE ideas SET
                     title=?, current_thinking=?, current_thinking_updated_at=?,
                     status=?, sort_order=?, updated_at=?
                   WHERE id=?""",
                (idea.title, idea.current_thinking,
                 idea.current_thinking_updated_at, idea.status,
                 idea.sort_order, idea.updated_at, idea.id),
            )

    def find_by_id(self, iid: str) -> Optional[Idea]:
        with transaction() as conn:
            row = conn.execute(
                "SELECT * FROM ideas WHERE id = ?", (iid,)
            ).fetchone()
        if row is None:
            return None
        return Idea(**dict(row))

    def find_all(self, status: Optional[str] = None, limit: int = 100) -> list[Idea]:
        """Active ideas come back in sort order, archived ones most recent first."""
        with transaction() as conn:
            if status == "active":
                rows = conn.execute(
                    """SELECT * FROM ideas WHERE status = 'active'
                       ORDER BY sort_order ASC, created_at ASC LIMIT ?""",
                    (limit,),
                ).fetchall()
            elif status:
                rows = conn.execute(
                    "SELECT * FROM ideas WHERE status = ? ORDER BY updated_at DESC LIMIT ?",
                    (status, limit),
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM ideas ORDER BY updated_at DESC LIMIT ?",
                    (limit,),
                ).fetchall()
        return [Idea(**dict(r)) for r in rows]

    def count_active(self) -> int:
        with transaction() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM ideas WHERE status = 'active'"
            ).fetchone()
        return row[0]

    def next_sort_order(self) -> int:
        with transaction() as conn:
            row = conn.execute("SELECT MAX(sort_order) FROM ideas").fetchone()
        return (row[0] or 0) + 1

    def delete(self, iid: str) -> None:
        """Delete an idea; its elements go with it (ON DELETE CASCADE)."""
        with transaction() as conn:
            conn.execute("DELETE FROM ideas WHERE id = ?", (iid,))


class ElementDAO:
    def insert(self, element: Element) -> None:
        with transaction() as conn:
            conn.execute(
                """INSERT INTO elements
                   (id, idea_id, type, source, content, metadata,
                    is_archived, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (element.id, element.idea_id, element.type, element.source,
                 element.content, json.dumps(element.metadata),
                 int(element.is_archived), element.created_at),
            )

    def update(self, element: Element) -> None:
        """Replace the mutable fields with those of a new Element object."""
        with transaction() as conn:
            conn.execute(
                """UPDATE elements SET
                     idea_id=?, type=?, content=?, metadata=?, is_archived=?
                   WHERE id=?""",
                (element.idea_id, element.type, element.content,
                 json.dumps(element.metadata), int(element.is_archived),
                 element.id),
            )

    def find_by_id(self, eid: str) -> Optional[Element]:
        with transaction() as conn:
            row = conn.execute(
                "SELECT * FROM elements WHERE id = ?", (eid,)
            ).fetchone()
        if row is None:
            return None
        return _row_to_element(row)

    def find_by_idea(
        self,
        idea_id: str,
        archived: bool = False,
        newest_first: bool = True,
    ) -> list[Element]:
        order = "DESC" if newest_first else "ASC"
        with transaction() as conn:
            rows = conn.execute(
                f"""SELECT * FROM elements
                    WHERE idea_id = ? AND is_archived = ?
                    ORDER BY created_at {order}""",
                (idea_id, int(archived)),
            ).fetchall()
        return [_row_to_element(r) for r in rows]

    def find_unfiled(self, drawer: Optional[bool] = None, limit: int = 200) -> list[Element]:
        """Unfiled, non-archived elements.

        drawer=True returns Drawer items, drawer=False the Inbox, None both.
        """
        clauses = ["idea_id IS NULL", "is_archived = 0"]
        if drawer is True:
            clauses.append("json_extract(metadata, '$.drawer') = 1")
        elif drawer is False:
            clauses.append("COALESCE(json_extract(metadata, '$.drawer'), 0) != 1")

        where = " AND ".join(clauses)
        with transaction() as conn:
            rows = conn.execute(
                f"SELECT * FROM elements WHERE {where} ORDER BY created_at DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [_row_to_element(r) for r in rows]

    def count_unfiled(self, drawer: Optional[bool] = None) -> int:
        return len(self.find_unfiled(drawer=drawer, limit=-1))

    def delete(self, eid: str) -> None:
        with transaction() as conn:
            conn.execute("DELETE FROM elements WHERE id = ?", (eid,))

    def delete_by_idea(self, idea_id: str) -> int:
        """Delete every element filed under an idea; returns the count."""
        with transaction() as conn:
            cur = conn.execute("DELETE FROM elements WHERE idea_id = ?", (idea_id,))
            removed = cur.rowcount
        return removed
