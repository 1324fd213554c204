"""Spark request orchestration.

Pipeline: load idea + elements -> summarize -> compose prompts -> LLM ->
persist a spark element (big sparks) or hand the reply back (mini sparks).
"""
import logging
from dataclasses import dataclass, replace
from typing import Optional

from spark.app.config import get_settings
from spark.ideas.service import ElementNotFoundError, IdeaNotFoundError
from spark.storage.dao import Element, ElementDAO, IdeaDAO, new_id, utc_now
from spark.thinking.attachments import Attachment, fetch_attachment
from spark.thinking.context import build_element_context, build_elements_summary
from spark.thinking.metadata import resolve_filename, resolve_url
from spark.thinking.models import AnthropicClient, ContentBlocks, LLMClient, NoLLMClient
from spark.thinking.prompts import (
    DRAWER_FALLBACK_PROMPT,
    MINI_ACTIONS,
    MINI_SPARK_KINDS,
    SYSTEM_PROMPT_DRAWER,
    attachment_failure_note,
    build_mini_spark_prompt,
    get_spark_prompt,
    get_system_prompt_with_idea,
    normalize_action,
)

logger = logging.getLogger("spark.thinking.agent")


class SparkRequestError(ValueError):
    """The spark request is missing something it needs."""


@dataclass(frozen=True)
class SparkRequest:
    spark_type: str
    idea_id: Optional[str] = None
    custom_prompt: Optional[str] = None
    attachment: Optional[Attachment] = None
    drawer_mode: bool = False


@dataclass(frozen=True)
class SparkResult:
    content: str
    element: Optional[Element] = None


def get_llm_client() -> LLMClient:
    """Get the configured LLM client (NoLLMClient without an API key)."""
    settings = get_settings()
    if not settings.llm_enabled:
        logger.info("LLM disabled (provider=%s); using offline client", settings.llm_provider)
        return NoLLMClient()
    return AnthropicClient(
        api_key=settings.anthropic_api_key,
        model=settings.anthropic_model,
        base_url=settings.anthropic_base_url,
        version=settings.anthropic_version,
        timeout=settings.llm_timeout,
    )


def _build_message(
    user_prompt: str,
    attachment: Optional[Attachment],
    drawer: bool = False,
) -> ContentBlocks:
    """User turn: attachment blocks first, then the prompt text."""
    if attachment is None:
        return [{"type": "text", "text": user_prompt}]

    blocks = fetch_attachment(attachment)
    if blocks:
        return [*blocks, {"type": "text", "text": user_prompt}]

    note = attachment_failure_note(attachment.filename, drawer=drawer)
    return [{"type": "text", "text": user_prompt + note}]


def build_idea_system_prompt(idea_id: str) -> str:
    """Load an idea and its live elements and compose the system prompt."""
    idea = IdeaDAO().find_by_id(idea_id)
    if idea is None:
        raise IdeaNotFoundError(f"Idea not found: {idea_id}")

    elements = ElementDAO().find_by_idea(idea_id, archived=False, newest_first=False)
    summary = build_elements_summary(elements)
    logger.debug(
        "Composed context for idea %s: %d elements, summary %d chars",
        idea_id, len(elements), len(summary),
    )
    return get_system_prompt_with_idea(
        idea.title,
        idea.current_thinking,
        summary,
        len(elements),
    )


def _run_drawer_spark(request: SparkRequest, client: LLMClient) -> SparkResult:
    user_prompt = request.custom_prompt or DRAWER_FALLBACK_PROMPT
    message = _build_message(user_prompt, request.attachment, drawer=True)
    content = client.generate(
        SYSTEM_PROMPT_DRAWER, message, max_tokens=get_settings().spark_max_tokens,
    )
    return SparkResult(content=content)


def run_spark(request: SparkRequest, client: Optional[LLMClient] = None) -> SparkResult:
    """Run one spark and persist it when it is an idea-level spark.

    Raises SparkRequestError, IdeaNotFoundError, or LLMError from the client.
    """
    client = client or get_llm_client()
    spark_type = normalize_action(request.spark_type)

    if request.drawer_mode and spark_type in MINI_ACTIONS:
        logger.info("Drawer spark: type=%s", spark_type)
        return _run_drawer_spark(request, client)

    if not request.idea_id:
        raise SparkRequestError("ideaId is required")

    system_prompt = build_idea_system_prompt(request.idea_id)
    user_prompt = get_spark_prompt(spark_type, request.custom_prompt)
    message = _build_message(user_prompt, request.attachment)

    logger.info("Spark: idea=%s type=%s", request.idea_id, spark_type or "default")
    content = client.generate(
        system_prompt, message, max_tokens=get_settings().spark_max_tokens,
    )

    if spark_type in MINI_ACTIONS:
        return SparkResult(content=content)

    metadata = {"spark_type": spark_type or "default"}
    if spark_type == "custom" and request.custom_prompt:
        metadata["prompt"] = request.custom_prompt

    element = Element(
        id=new_id(),
        type="spark",
        created_at=utc_now(),
        idea_id=request.idea_id,
        source="ai",
        content=content,
        metadata=metadata,
    )
    ElementDAO().insert(element)
    return SparkResult(content=content, element=element)


def has_limited_context(element: Element) -> bool:
    """An article we only know by its URL/title: no body, no description."""
    return (
        element.type == "article"
        and not element.content
        and not element.metadata.get("description")
    )


def element_attachment(element: Element) -> Optional[Attachment]:
    url = resolve_url(element.metadata)
    if element.type not in ("file", "image") or not url:
        return None
    return Attachment(
        url=url,
        type=element.type,
        file_type=element.metadata.get("file_type"),
        filename=resolve_filename(element.metadata),
    )


def run_mini_spark(
    element_id: str,
    kind: str = "summarize",
    client: Optional[LLMClient] = None,
) -> SparkResult:
    """Summarize an element or suggest related threads, storing the reply.

    The reply lands in `metadata.summary` or `metadata.related`. Unfiled
    elements use the drawer task wording.
    """
    if kind not in MINI_SPARK_KINDS:
        raise SparkRequestError(f"Unknown mini spark: {kind}")

    dao = ElementDAO()
    element = dao.find_by_id(element_id)
    if element is None:
        raise ElementNotFoundError(f"Element not found: {element_id}")

    element_context = build_element_context(
        element.content,
        element.type,
        element.metadata,
        resolve_url(element.metadata),
        resolve_filename(element.metadata),
    )
    drawer = element.idea_id is None
    prompt = build_mini_spark_prompt(
        kind, element_context, has_limited_context(element), drawer=drawer,
    )

    result = run_spark(
        SparkRequest(
            spark_type="mini",
            idea_id=element.idea_id,
            custom_prompt=prompt,
            attachment=element_attachment(element),
            drawer_mode=drawer,
        ),
        client=client,
    )

    key = "summary" if kind == "summarize" else "related"
    updated = replace(element, metadata={**element.metadata, key: result.content})
    dao.update(updated)
    return SparkResult(content=result.content, element=updated)
