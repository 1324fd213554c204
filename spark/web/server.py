"""FastAPI JSON API for Spark."""
import logging
from dataclasses import asdict
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from spark.app.paths import ensure_dirs
from spark.ideas import service
from spark.ideas.service import ActiveIdeaLimitError, ElementNotFoundError, IdeaNotFoundError
from spark.ingest.url_meta import fetch_url_meta
from spark.scouts.generator import (
    Scout,
    ScoutParseError,
    convert_scout_to_idea,
    expand_scout,
    generate_scouts,
    go_deeper,
    save_scout_as_element,
)
from spark.storage.db import init_db
from spark.thinking.agent import SparkRequest, SparkRequestError, run_mini_spark, run_spark
from spark.thinking.attachments import Attachment
from spark.thinking.models import LLMError

logger = logging.getLogger("spark.web")

app = FastAPI(title="Spark")


@app.on_event("startup")
async def startup():
    ensure_dirs()
    init_db()


def _raise_http(e: Exception):
    """Translate service errors into HTTP errors."""
    if isinstance(e, (IdeaNotFoundError, ElementNotFoundError)):
        raise HTTPException(status_code=404, detail=str(e)) from e
    if isinstance(e, ActiveIdeaLimitError):
        raise HTTPException(status_code=409, detail=str(e)) from e
    if isinstance(e, (SparkRequestError, ValueError)):
        raise HTTPException(status_code=400, detail=str(e)) from e
    raise e


# ── Request bodies ──────────────────────────────────────────────


class IdeaCreate(BaseModel):
    title: str


class IdeaUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    current_thinking: Optional[str] = Field(default=None, alias="currentThinking")


class ElementCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = None
    idea_id: Optional[str] = Field(default=None, alias="ideaId")
    drawer: bool = False
    url: Optional[str] = None
    filename: Optional[str] = None
    file_type: Optional[str] = Field(default=None, alias="fileType")
    storage_path: Optional[str] = Field(default=None, alias="storagePath")


class ElementUpdate(BaseModel):
    content: Optional[str] = None
    note: Optional[str] = None


class ElementMove(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    idea_id: str = Field(alias="ideaId")


class AttachmentBody(BaseModel):
    url: str
    type: str
    file_type: Optional[str] = None
    filename: Optional[str] = None


class SparkBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    spark_type: str = Field(default="", alias="sparkType")
    idea_id: Optional[str] = Field(default=None, alias="ideaId")
    custom_prompt: Optional[str] = Field(default=None, alias="customPrompt")
    attachment: Optional[AttachmentBody] = None
    drawer_mode: bool = Field(default=False, alias="drawerMode")


class ScoutBody(BaseModel):
    id: str = ""
    title: str
    zone: str = ""
    expanded: Optional[str] = None
    deeper: dict[str, str] = Field(default_factory=dict)


class ScoutsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: str
    zones: Optional[str] = None
    scout: Optional[ScoutBody] = None
    lens: Optional[str] = None
    idea_id: Optional[str] = Field(default=None, alias="ideaId")
    convert: bool = False


class UrlMetaRequest(BaseModel):
    url: Optional[str] = None


# ── Ideas ───────────────────────────────────────────────────────


@app.get("/api/ideas")
def list_ideas(status: str = "active"):
    try:
        ideas = service.list_ideas(status=status or None)
    except Exception as e:
        _raise_http(e)
    return {"ideas": [asdict(i) for i in ideas], "count": len(ideas)}


@app.post("/api/ideas", status_code=201)
def create_idea(body: IdeaCreate):
    try:
        idea = service.create_idea(body.title)
    except Exception as e:
        _raise_http(e)
    return asdict(idea)


@app.get("/api/ideas/{idea_id}")
def get_idea(idea_id: str):
    try:
        idea = service.get_idea(idea_id)
        elements = service.list_elements(idea_id)
        archived = service.list_elements(idea_id, archived=True)
    except Exception as e:
        _raise_http(e)
    return {
        "idea": asdict(idea),
        "elements": [asdict(el) for el in elements],
        "archived_elements": [asdict(el) for el in archived],
    }


@app.patch("/api/ideas/{idea_id}")
def update_idea(idea_id: str, body: IdeaUpdate):
    try:
        idea = service.get_idea(idea_id)
        if body.title is not None:
            idea = service.update_title(idea_id, body.title)
        if body.current_thinking is not None:
            idea = service.update_thinking(idea_id, body.current_thinking)
    except Exception as e:
        _raise_http(e)
    return asdict(idea)


@app.post("/api/ideas/{idea_id}/archive")
def archive_idea(idea_id: str):
    try:
        return asdict(service.archive_idea(idea_id))
    except Exception as e:
        _raise_http(e)


@app.post("/api/ideas/{idea_id}/unarchive")
def unarchive_idea(idea_id: str):
    try:
        return asdict(service.unarchive_idea(idea_id))
    except Exception as e:
        _raise_http(e)


@app.delete("/api/ideas/{idea_id}")
def delete_idea(idea_id: str):
    try:
        service.delete_idea(idea_id)
    except Exception as e:
        _raise_http(e)
    return {"deleted": idea_id}


# ── Elements ────────────────────────────────────────────────────


@app.post("/api/elements", status_code=201)
def create_element(body: ElementCreate):
    """Quick add text/links, or record an uploaded file by URL."""
    try:
        if body.url and body.filename:
            element = service.add_file(
                url=body.url,
                filename=body.filename,
                file_type=body.file_type,
                idea_id=body.idea_id,
                storage_path=body.storage_path,
                drawer=body.drawer,
            )
        else:
            element = service.quick_add(body.text or "", idea_id=body.idea_id, drawer=body.drawer)
    except Exception as e:
        _raise_http(e)
    return asdict(element)


@app.get("/api/inbox")
def inbox():
    elements = service.list_inbox()
    return {"elements": [asdict(el) for el in elements], "count": len(elements)}


@app.get("/api/drawer")
def drawer():
    elements = service.list_drawer()
    return {"elements": [asdict(el) for el in elements], "count": len(elements)}


@app.patch("/api/elements/{element_id}")
def update_element(element_id: str, body: ElementUpdate):
    try:
        element = service.get_element(element_id)
        if body.content is not None:
            element = service.edit_content(element_id, body.content)
        if body.note is not None:
            element = service.set_note(element_id, body.note)
    except Exception as e:
        _raise_http(e)
    return asdict(element)


@app.post("/api/elements/{element_id}/archive")
def archive_element(element_id: str):
    try:
        return asdict(service.archive_element(element_id))
    except Exception as e:
        _raise_http(e)


@app.post("/api/elements/{element_id}/unarchive")
def unarchive_element(element_id: str):
    try:
        return asdict(service.unarchive_element(element_id))
    except Exception as e:
        _raise_http(e)


@app.post("/api/elements/{element_id}/move")
def move_element(element_id: str, body: ElementMove):
    try:
        return asdict(service.move_element(element_id, body.idea_id))
    except Exception as e:
        _raise_http(e)


@app.post("/api/elements/{element_id}/drawer")
def move_to_drawer(element_id: str):
    try:
        return asdict(service.move_to_drawer(element_id))
    except Exception as e:
        _raise_http(e)


@app.delete("/api/elements/{element_id}")
def delete_element(element_id: str):
    try:
        service.delete_element(element_id)
    except Exception as e:
        _raise_http(e)
    return {"deleted": element_id}


def _mini_spark(element_id: str, kind: str):
    try:
        result = run_mini_spark(element_id, kind=kind)
    except LLMError as e:
        logger.error("Mini spark failed for %s: %s", element_id, e)
        raise HTTPException(status_code=500, detail="AI request failed") from e
    except Exception as e:
        _raise_http(e)
    return {"content": result.content, "element": asdict(result.element)}


@app.post("/api/elements/{element_id}/summarize")
def summarize_element(element_id: str):
    return _mini_spark(element_id, "summarize")


@app.post("/api/elements/{element_id}/related")
def related_element(element_id: str):
    return _mini_spark(element_id, "related")


# ── Spark ───────────────────────────────────────────────────────


@app.post("/api/spark")
def spark(body: SparkBody):
    attachment = None
    if body.attachment:
        attachment = Attachment(**body.attachment.model_dump())

    request = SparkRequest(
        spark_type=body.spark_type,
        idea_id=body.idea_id,
        custom_prompt=body.custom_prompt,
        attachment=attachment,
        drawer_mode=body.drawer_mode,
    )
    try:
        result = run_spark(request)
    except LLMError as e:
        logger.error("Spark failed: %s", e)
        raise HTTPException(status_code=500, detail="AI request failed") from e
    except Exception as e:
        _raise_http(e)

    if result.element is None:
        return {"content": result.content}
    return {"success": True, "content": result.content, "element": asdict(result.element)}


# ── Scouts ──────────────────────────────────────────────────────


def _to_scout(body: Optional[ScoutBody]) -> Scout:
    if body is None:
        raise HTTPException(status_code=400, detail="scout is required")
    return Scout(
        id=body.id,
        title=body.title,
        zone=body.zone,
        expanded=body.expanded,
        deeper=dict(body.deeper),
    )


@app.post("/api/scouts")
def scouts(body: ScoutsRequest):
    try:
        if body.action == "generate":
            generated = generate_scouts(body.zones or "")
            return {"scouts": [asdict(s) for s in generated]}

        if body.action == "expand":
            return {"expanded": expand_scout(_to_scout(body.scout))}

        if body.action == "deeper":
            return {"content": go_deeper(_to_scout(body.scout), body.lens or "")}

        if body.action == "save":
            scout = _to_scout(body.scout)
            if body.convert:
                idea, element = convert_scout_to_idea(scout)
                return {"idea": asdict(idea), "element": asdict(element)}
            if body.idea_id:
                service.get_idea(body.idea_id)
            return {"element": asdict(save_scout_as_element(scout, idea_id=body.idea_id))}
    except (LLMError, ScoutParseError) as e:
        logger.error("Scouts API error: %s", e)
        raise HTTPException(status_code=500, detail=str(e)) from e
    except HTTPException:
        raise
    except Exception as e:
        _raise_http(e)

    raise HTTPException(status_code=400, detail="Unknown action")


# ── Link preview ────────────────────────────────────────────────


@app.post("/api/url-meta")
def url_meta(body: UrlMetaRequest):
    if not body.url:
        raise HTTPException(status_code=400, detail="No URL provided")
    return asdict(fetch_url_meta(body.url))
