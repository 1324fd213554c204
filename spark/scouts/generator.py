"""Scout generation, expansion, and conversion into ideas."""
import json
import logging
import re
import time
from dataclasses import dataclass, field
from typing import Optional

from spark.app.config import get_settings
from spark.ideas.service import create_idea
from spark.storage.dao import Element, ElementDAO, Idea, new_id, utc_now
from spark.scouts.prompts import (
    DEFAULT_LENS,
    LENS_PROMPTS,
    SCOUT_SYSTEM_PROMPT,
    build_deeper_prompt,
    build_expand_prompt,
    build_generate_prompt,
)
from spark.thinking.agent import get_llm_client
from spark.thinking.models import LLMClient

logger = logging.getLogger("spark.scouts")

_FENCE_RE = re.compile(r"```(?:json)?\n?")


class ScoutParseError(ValueError):
    """The LLM reply could not be read as a list of scouts."""


@dataclass(frozen=True)
class Scout:
    id: str
    title: str
    zone: str = ""
    expanded: Optional[str] = None
    deeper: dict[str, str] = field(default_factory=dict)


def parse_scouts(text: str, now_ms: Optional[int] = None) -> list[Scout]:
    """Parse the JSON array of {title, zone} the model was asked for.

    Code fences around the JSON are stripped first.
    """
    cleaned = _FENCE_RE.sub("", text).strip()
    try:
        raw = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse scouts JSON (%d chars)", len(text))
        raise ScoutParseError("Failed to parse response") from e

    if not isinstance(raw, list):
        raise ScoutParseError("Expected a JSON array of scouts")

    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    scouts: list[Scout] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict) or not item.get("title"):
            logger.warning("Skipping malformed scout at index %d", i)
            continue
        scouts.append(Scout(
            id=f"scout-{stamp}-{i}",
            title=str(item["title"]).strip(),
            zone=str(item.get("zone") or "").strip(),
        ))
    return scouts


def _zones_text(zones) -> str:
    if isinstance(zones, str):
        return zones
    return ", ".join(zones)


def generate_scouts(zones, client: Optional[LLMClient] = None) -> list[Scout]:
    """Ask for a fresh batch of provocations across the given topics."""
    client = client or get_llm_client()
    settings = get_settings()
    zones_text = _zones_text(zones) or ", ".join(settings.get_default_zones())
    reply = client.generate(
        SCOUT_SYSTEM_PROMPT,
        build_generate_prompt(zones_text),
        max_tokens=settings.scout_max_tokens,
    )
    scouts = parse_scouts(reply)
    logger.info("Generated %d scouts for zones: %s", len(scouts), zones_text)
    return scouts


def expand_scout(scout: Scout, client: Optional[LLMClient] = None) -> str:
    client = client or get_llm_client()
    return client.generate(
        SCOUT_SYSTEM_PROMPT,
        build_expand_prompt(scout.title, scout.zone),
        max_tokens=get_settings().scout_expand_max_tokens,
    )


def go_deeper(scout: Scout, lens: str, client: Optional[LLMClient] = None) -> str:
    """Explore a scout through one lens; unknown lenses use "tension"."""
    client = client or get_llm_client()
    if lens not in LENS_PROMPTS:
        logger.info("Unknown lens %r, using %s", lens, DEFAULT_LENS)
    return client.generate(
        SCOUT_SYSTEM_PROMPT,
        build_deeper_prompt(scout.title, scout.expanded or "", lens),
        max_tokens=get_settings().scout_expand_max_tokens,
    )


def save_scout_as_element(scout: Scout, idea_id: Optional[str] = None) -> Element:
    """Keep a scout: unfiled scouts land in the Drawer."""
    metadata: dict = {"scout_id": scout.id, "zone": scout.zone}
    if scout.expanded:
        metadata["expanded"] = scout.expanded
    if scout.deeper:
        metadata["deeper"] = dict(scout.deeper)
    if idea_id is None:
        metadata["drawer"] = True

    element = Element(
        id=new_id(),
        type="scout",
        created_at=utc_now(),
        idea_id=idea_id,
        source="ai",
        content=scout.title,
        metadata=metadata,
    )
    ElementDAO().insert(element)
    return element


def convert_scout_to_idea(scout: Scout) -> tuple[Idea, Element]:
    """Start a new idea from a scout, filing the scout as its first element."""
    idea = create_idea(scout.title)
    element = save_scout_as_element(scout, idea_id=idea.id)
    logger.info("Converted scout %s into idea %s", scout.id, idea.id)
    return idea, element
