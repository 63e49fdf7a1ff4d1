"""
Global Styles Router

Endpoints for user global styles documents and theme-declared styles.

Routes are matched in declaration order:
- GET  /api/global-styles/themes/{stylesheet}/variations
- GET  /api/global-styles/themes/{stylesheet}
- GET, POST, PUT, PATCH  /api/global-styles/{id}

Theme paths outside the stylesheet grammar fall through to the item route,
where they fail to resolve as an id. Paths matching no route are answered
with rest_no_route.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from globalstyles.config import Settings, get_settings
from globalstyles.core import convertors  # noqa: F401  (registers path convertors)
from globalstyles.core.auth import CurrentUserOptional, UserPrincipal
from globalstyles.core.database import DbSession
from globalstyles.core.fields import filter_response_fields, parse_fields
from globalstyles.models.contracts.global_styles import (
    GlobalStylesResponse,
    GlobalStylesUpdateRequest,
    RequestContext,
    ThemeGlobalStylesResponse,
)
from globalstyles.services.authorization import AuthorizationService
from globalstyles.services.global_styles import GlobalStylesService
from globalstyles.services.theme_registry import ThemeRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/global-styles", tags=["Global Styles"])

AppSettings = Annotated[Settings, Depends(get_settings)]
ContextParam = Annotated[
    RequestContext,
    Query(description="Scope under which the request is made; determines links present in the response"),
]
FieldsParam = Annotated[
    str | None,
    Query(alias="_fields", description="Comma-separated list of fields to include in the response"),
]

ITEM_METHODS = ["GET", "POST", "PUT", "PATCH"]


def _get_service(
    db: AsyncSession,
    user: UserPrincipal | None,
    settings: Settings,
) -> GlobalStylesService:
    return GlobalStylesService(
        db,
        AuthorizationService(user, multisite=settings.multisite),
        ThemeRegistry(settings.themes_root),
    )


def _url(settings: Settings, path: str) -> str:
    return f"{settings.public_url}{router.prefix}{path}"


def _prepare_response(
    data: dict[str, Any],
    links: dict[str, list[dict[str, Any]]],
    fields: str | None,
) -> dict[str, Any]:
    """Apply the _fields selection and attach links."""
    selected = parse_fields(fields)
    if selected is None:
        return {**data, "_links": links}

    response = filter_response_fields(data, selected)
    if "_links" in selected:
        response["_links"] = links
    return response


def _item_links(
    settings: Settings,
    service: GlobalStylesService,
    global_styles_id: int,
    context: RequestContext,
) -> dict[str, list[dict[str, Any]]]:
    href = _url(settings, f"/{global_styles_id}")
    links: dict[str, list[dict[str, Any]]] = {"self": [{"href": href}]}

    # Action links describe what the caller may do while editing
    if context == "edit":
        for action in service.get_available_actions():
            links[action] = [{"href": href}]

    return links


def _schema(model: type[BaseModel], title: str) -> dict[str, Any]:
    schema = model.model_json_schema()
    schema["title"] = title
    return schema


# =============================================================================
# Theme Styles
# =============================================================================


@router.get(
    "/themes/{stylesheet:variations_stylesheet}/variations",
    summary="List theme style variations",
)
async def get_theme_style_variations(
    stylesheet: str,
    db: DbSession,
    user: CurrentUserOptional,
    settings: AppSettings,
) -> list[dict[str, Any]]:
    """
    List the style variations a theme ships in its styles/ directory.

    Each variation is merged over the theme's base styles.
    """
    service = _get_service(db, user, settings)
    variations = service.get_theme_style_variations(stylesheet)
    return [variation.model_dump(exclude_none=True) for variation in variations]


@router.get(
    "/themes/{stylesheet:stylesheet}",
    summary="Get theme global styles",
)
async def get_theme_global_styles(
    stylesheet: str,
    db: DbSession,
    user: CurrentUserOptional,
    settings: AppSettings,
    fields: FieldsParam = None,
) -> dict[str, Any]:
    """
    Get the base settings and styles declared by a theme.

    Requires the manage_global_styles capability.
    """
    service = _get_service(db, user, settings)
    theme_styles = service.get_theme_global_styles(stylesheet)

    links = {"self": [{"href": _url(settings, f"/themes/{stylesheet}")}]}
    return _prepare_response(theme_styles.model_dump(), links, fields)


@router.options("/themes/{stylesheet:stylesheet}", include_in_schema=False)
async def describe_theme_global_styles(stylesheet: str) -> dict[str, Any]:
    """Describe the theme global styles route."""
    return {
        "namespace": "api",
        "methods": ["GET"],
        "schema": _schema(ThemeGlobalStylesResponse, "global-styles-theme"),
    }


# =============================================================================
# User Global Styles
# =============================================================================


@router.get(
    "/{global_styles_id:global_styles_id}",
    summary="Get global styles",
)
async def get_global_styles(
    global_styles_id: str,
    db: DbSession,
    user: CurrentUserOptional,
    settings: AppSettings,
    context: ContextParam = "view",
    fields: FieldsParam = None,
) -> dict[str, Any]:
    """
    Get a user global styles document.

    The edit context requires edit rights and adds action links for the
    operations the caller may perform.
    """
    service = _get_service(db, user, settings)
    item = await service.get_global_styles(global_styles_id, context)

    links = _item_links(settings, service, item.id, context)
    return _prepare_response(item.model_dump(), links, fields)


@router.api_route(
    "/{global_styles_id:global_styles_id}",
    methods=["POST", "PUT", "PATCH"],
    summary="Update global styles",
)
async def update_global_styles(
    global_styles_id: str,
    db: DbSession,
    user: CurrentUserOptional,
    settings: AppSettings,
    request: Annotated[GlobalStylesUpdateRequest | None, Body()] = None,
    context: ContextParam = "view",
    fields: FieldsParam = None,
) -> dict[str, Any]:
    """
    Update a user global styles document.

    settings and styles replace the stored values wholesale; omitted members
    are left unchanged. Custom CSS containing markup is rejected and nothing
    is written.
    """
    service = _get_service(db, user, settings)
    item = await service.update_global_styles(
        global_styles_id,
        request or GlobalStylesUpdateRequest(),
    )

    await db.commit()

    links = _item_links(settings, service, item.id, context)
    return _prepare_response(item.model_dump(), links, fields)


@router.options("/{global_styles_id:global_styles_id}", include_in_schema=False)
async def describe_global_styles(global_styles_id: str) -> dict[str, Any]:
    """Describe the global styles item route, including its schema."""
    return {
        "namespace": "api",
        "methods": ITEM_METHODS,
        "endpoints": [
            {"methods": ["GET"], "args": {"id": {}, "context": {"enum": ["view", "edit"]}}},
            {"methods": ["POST", "PUT", "PATCH"], "args": {"id": {}, "title": {}, "settings": {}, "styles": {}}},
        ],
        "schema": _schema(GlobalStylesResponse, "global-styles"),
    }
