# ============================================================================
# SLD ROUTES
# ============================================================================
# STATUS: Core - HTTP endpoints for the SLD store
# PURPOSE: Template ingestion, config value replacement and read queries
# CREATED: 18 OCT 2026
# ============================================================================
"""
SLD Routes

Endpoints:
- POST /api/v1/sld/templates                          - Ingest template + structure
- GET  /api/v1/sld/templates                          - List templates
- GET  /api/v1/sld/templates/tree                     - Templates with feature types
- GET  /api/v1/sld/templates/{template_id}            - One template
- GET  /api/v1/sld/templates/{template_id}/featuretypes - Feature types of a template
- PUT  /api/v1/sld/configs/{config_id}/values         - Replace a config's values
- GET  /api/v1/sld/configs/{config_id}/values         - Current values
- GET  /api/v1/sld/configs/{config_id}/owner          - Owner token
"""

import logging
from typing import Any, Dict, List, NoReturn, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from core.errors import (
    DatabaseConnectionError,
    DuplicateParamError,
    IngestError,
    NotFoundError,
    ReplaceError,
    RepositoryError,
    StatementError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sld", tags=["sld"])


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================

_sld_service = None


def set_sld_services(sld_service):
    """Called by main.py at startup to inject the SLD service."""
    global _sld_service
    _sld_service = sld_service


def _get_sld_service():
    """Get the SLD service, raising 503 if not initialized."""
    if _sld_service is None:
        raise HTTPException(503, "SLD service not initialized")
    return _sld_service


def _raise_http(e: RepositoryError) -> NoReturn:
    """Map repository errors onto HTTP status codes."""
    if isinstance(e, (IngestError, DuplicateParamError, ReplaceError)):
        detail: Dict[str, Any] = {"error": type(e).__name__, "message": str(e)}
        line_number = getattr(e, "line_number", None)
        if line_number is not None:
            detail["line_number"] = line_number
        param_id = getattr(e, "param_id", None)
        if param_id is not None:
            detail["param_id"] = param_id
        raise HTTPException(422, detail)
    if isinstance(e, NotFoundError):
        raise HTTPException(404, str(e))
    if isinstance(e, DatabaseConnectionError):
        logger.error(f"Database unavailable during {e.operation}: {e}")
        raise HTTPException(503, "Database unavailable")
    if isinstance(e, StatementError):
        logger.error(f"Statement failed during {e.operation}: {e}")
    else:
        logger.error(f"Repository error during {e.operation}: {e}")
    raise HTTPException(500, "Database operation failed")


# ============================================================================
# REQUEST / RESPONSE MODELS
# ============================================================================

class TemplateIngestRequest(BaseModel):
    """Request body for template ingestion."""
    name: str = Field(..., min_length=1, max_length=255)
    content: str
    lines: List[str] = Field(default_factory=list, description="Flat structure records")
    uuid: Optional[str] = Field(default=None, max_length=64)
    sld_filename: Optional[str] = Field(default=None, max_length=255)
    wms_url: Optional[str] = Field(default=None, max_length=500)


class TemplateIngestResponse(BaseModel):
    """Response after successful ingestion."""
    template_id: int
    feature_types: int
    rules: int
    params: int


class ConfigValueItem(BaseModel):
    param_id: int
    value: Any = ""


class ConfigValuesRequest(BaseModel):
    """Request body for config value replacement."""
    values: List[ConfigValueItem] = Field(default_factory=list)
    uuid: Optional[str] = Field(default=None, description="Owner token; checked when given")


class ConfigValuesResponse(BaseModel):
    config_id: int
    value_count: int


class ConfigOwnerResponse(BaseModel):
    config_id: int
    uuid: Optional[str] = None


# ============================================================================
# TEMPLATES
# ============================================================================

@router.post("/templates", response_model=TemplateIngestResponse, status_code=201)
async def ingest_template(request: TemplateIngestRequest):
    """
    Store a template and the structure described by its flat records.

    All rows are written in one transaction; any invalid record stores nothing.
    """
    svc = _get_sld_service()

    try:
        result = await svc.ingest_template(
            content=request.content,
            name=request.name,
            lines=request.lines,
            uuid=request.uuid,
            sld_filename=request.sld_filename,
            wms_url=request.wms_url,
        )
    except RepositoryError as e:
        _raise_http(e)

    return TemplateIngestResponse(
        template_id=result.template_id,
        feature_types=result.feature_types,
        rules=result.rules,
        params=result.params,
    )


@router.get("/templates")
async def list_templates(include_content: bool = Query(False)):
    """List all templates, content omitted unless requested."""
    svc = _get_sld_service()
    try:
        templates = await svc.get_template(None, include_content=include_content)
    except RepositoryError as e:
        _raise_http(e)
    return [t.model_dump(mode="json", exclude=None if include_content else {"content"}) for t in templates]


@router.get("/templates/tree")
async def template_tree(template_id: Optional[int] = Query(None)):
    """Templates with their feature types attached."""
    svc = _get_sld_service()
    try:
        return await svc.get_template_tree(template_id)
    except RepositoryError as e:
        _raise_http(e)


@router.get("/templates/{template_id}")
async def get_template(template_id: int, include_content: bool = Query(False)):
    """Get one template."""
    if template_id <= 0:
        raise HTTPException(404, f"Template not found: {template_id}")

    svc = _get_sld_service()
    try:
        template = await svc.get_template(template_id, include_content=include_content)
    except NotFoundError:
        raise HTTPException(404, f"Template not found: {template_id}")
    except RepositoryError as e:
        _raise_http(e)
    return template.model_dump(mode="json", exclude=None if include_content else {"content"})


@router.get("/templates/{template_id}/featuretypes")
async def get_feature_types(template_id: int):
    """Feature types of a template in source order."""
    svc = _get_sld_service()
    try:
        feature_types = await svc.get_feature_types(template_id)
    except RepositoryError as e:
        _raise_http(e)
    return [ft.model_dump() for ft in feature_types]


# ============================================================================
# CONFIGS
# ============================================================================

@router.put("/configs/{config_id}/values", response_model=ConfigValuesResponse)
async def replace_config_values(config_id: int, request: ConfigValuesRequest):
    """
    Replace the complete value set of a config.

    When uuid is given it must match the config's owner.
    """
    svc = _get_sld_service()

    try:
        owned = await svc.check_config_ownership(config_id, request.uuid)
        if owned is None:
            raise HTTPException(404, f"Config not found: {config_id}")
        if request.uuid is not None and not owned:
            raise HTTPException(403, f"Config {config_id} is owned by another user")

        count = await svc.replace_config_values(config_id, request.values)
    except RepositoryError as e:
        _raise_http(e)

    return ConfigValuesResponse(config_id=config_id, value_count=count)


@router.get("/configs/{config_id}/values")
async def get_config_values(config_id: int):
    """Current value rows of a config."""
    svc = _get_sld_service()
    try:
        values = await svc.get_config_values(config_id)
    except RepositoryError as e:
        _raise_http(e)
    return [v.model_dump() for v in values]


@router.get("/configs/{config_id}/owner", response_model=ConfigOwnerResponse)
async def get_config_owner(config_id: int):
    """Owner token of a config."""
    svc = _get_sld_service()
    try:
        config = await svc.get_config(config_id)
    except RepositoryError as e:
        _raise_http(e)
    if config is None:
        raise HTTPException(404, f"Config not found: {config_id}")
    return ConfigOwnerResponse(config_id=config_id, uuid=config.uuid)
