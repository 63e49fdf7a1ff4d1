"""
Global Styles Service

Reads and updates user global styles documents, and reads theme-declared
base styles and style variations.

Permission checks run before any lookup, and every check runs before any
write: an update that fails validation leaves the stored document untouched.
"""

import html
import json
import logging
import re
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from globalstyles.core.exceptions import (
    CannotEdit,
    CannotManageGlobalStyles,
    CannotView,
    CustomCssIllegalMarkup,
    ForbiddenContext,
    GlobalStylesError,
    GlobalStylesNotFound,
    InvalidParam,
    ThemeNotFound,
)
from globalstyles.models import Post
from globalstyles.models.contracts.global_styles import (
    LATEST_SCHEMA,
    GlobalStylesResponse,
    GlobalStylesTitle,
    GlobalStylesUpdateRequest,
    RequestContext,
    ThemeGlobalStylesResponse,
    ThemeStyleVariation,
)
from globalstyles.repositories.global_styles import GlobalStylesRepository
from globalstyles.services.authorization import AuthorizationService, Capability
from globalstyles.services.css_sanitizer import filter_css
from globalstyles.services.theme_registry import (
    MAX_STYLESHEET_DEPTH,
    ThemeHandle,
    ThemeRegistry,
)

logger = logging.getLogger(__name__)

USER_THEME_JSON_FLAG = "isGlobalStylesUserThemeJSON"

ACTION_PUBLISH = "https://api.w.org/action-publish"
ACTION_EDIT_CSS = "https://api.w.org/action-edit-css"

_ID_PATTERN = re.compile(r"[0-9]+")

# Largest id the posts.id column (32-bit INTEGER) can hold
MAX_POST_ID = 2**31 - 1


def decode_user_config(content: str) -> dict[str, Any]:
    """
    Decode stored global styles content.

    Content that is not a JSON object flagged as user theme.json data
    decodes to an empty config.
    """
    try:
        config = json.loads(content) if content else None
    except json.JSONDecodeError:
        return {}

    if not isinstance(config, dict) or config.get(USER_THEME_JSON_FLAG) is not True:
        return {}
    return config


class GlobalStylesService:
    """Operations on global styles resources for one caller."""

    def __init__(
        self,
        db: AsyncSession,
        authorization: AuthorizationService,
        registry: ThemeRegistry,
    ):
        self.db = db
        self.authorization = authorization
        self.registry = registry
        self.repository = GlobalStylesRepository(db)

    # =========================================================================
    # User Global Styles
    # =========================================================================

    async def get_global_styles(
        self,
        global_styles_id: str,
        context: RequestContext = "view",
    ) -> GlobalStylesResponse:
        """
        Read a user global styles document.

        Raises:
            ForbiddenContext: edit context requested without edit rights
            CannotView: caller may not view global styles
            GlobalStylesNotFound: id is not a global styles document
        """
        if context == "edit":
            self._require(Capability.EDIT_GLOBAL_STYLES, ForbiddenContext)
        self._require(Capability.VIEW_GLOBAL_STYLES, CannotView)

        post = await self._get_post(global_styles_id)
        return self._prepare_item(post)

    async def update_global_styles(
        self,
        global_styles_id: str,
        request: GlobalStylesUpdateRequest,
    ) -> GlobalStylesResponse:
        """
        Update a user global styles document.

        Changes are flushed but not committed; the caller owns the transaction.

        Raises:
            CannotEdit: caller may not edit global styles
            GlobalStylesNotFound: id is not a global styles document
            CustomCssIllegalMarkup: styles.css contains markup
        """
        self._require(Capability.EDIT_GLOBAL_STYLES, CannotEdit)

        post = await self._get_post(global_styles_id)
        changes = self._prepare_changes(post, request)

        if changes:
            await self.repository.update(post, **changes)
            logger.info(
                f"Global styles {post.id} updated by user {self._user_id}: "
                f"{', '.join(sorted(changes))}"
            )

        return self._prepare_item(post)

    def get_available_actions(self) -> list[str]:
        """Action link relations the caller may perform on global styles."""
        actions = []
        if self.authorization.has_capability(Capability.PUBLISH_GLOBAL_STYLES):
            actions.append(ACTION_PUBLISH)
        if self.authorization.has_capability(Capability.EDIT_CSS):
            actions.append(ACTION_EDIT_CSS)
        return actions

    async def _get_post(self, global_styles_id: str) -> Post:
        post = None
        if _ID_PATTERN.fullmatch(global_styles_id):
            post_id = int(global_styles_id)
            if 0 < post_id <= MAX_POST_ID:
                post = await self.repository.get_by_id(post_id)

        if post is None or not post.is_global_styles:
            raise GlobalStylesNotFound()
        return post

    def _prepare_item(self, post: Post) -> GlobalStylesResponse:
        config = decode_user_config(post.content)
        settings = config.get("settings")
        styles = config.get("styles")

        return GlobalStylesResponse(
            id=post.id,
            title=GlobalStylesTitle(
                raw=post.title,
                rendered=html.escape(post.title, quote=False),
            ),
            settings=settings if isinstance(settings, dict) else {},
            styles=styles if isinstance(styles, dict) else {},
        )

    def _prepare_changes(
        self,
        post: Post,
        request: GlobalStylesUpdateRequest,
    ) -> dict[str, Any]:
        """Build the column changes for an update, validating custom CSS."""
        changes: dict[str, Any] = {}

        if request.styles is not None or request.settings is not None:
            existing = decode_user_config(post.content)
            config: dict[str, Any] = {}

            if request.styles is not None:
                css = request.styles.get("css")
                if css is not None:
                    self._validate_custom_css(css)
                config["styles"] = request.styles
            elif "styles" in existing:
                config["styles"] = existing["styles"]

            if request.settings is not None:
                config["settings"] = request.settings
            elif "settings" in existing:
                config["settings"] = existing["settings"]

            config[USER_THEME_JSON_FLAG] = True
            config["version"] = LATEST_SCHEMA
            changes["content"] = json.dumps(config)

        if isinstance(request.title, str):
            changes["title"] = request.title
        elif request.title is not None and request.title.raw:
            changes["title"] = request.title.raw

        return changes

    def _validate_custom_css(self, css: Any) -> None:
        if not isinstance(css, str):
            raise InvalidParam(
                "Invalid parameter(s): styles.css",
                details={"params": {"styles.css": "Custom CSS must be a string."}},
            )

        _, modified = filter_css(css)
        if modified:
            logger.warning(f"Rejected custom CSS with markup from user {self._user_id}")
            raise CustomCssIllegalMarkup()

    # =========================================================================
    # Theme Styles
    # =========================================================================

    def get_theme_global_styles(self, stylesheet: str) -> ThemeGlobalStylesResponse:
        """
        Read the base settings and styles a theme declares.

        Raises:
            CannotManageGlobalStyles: caller may not manage global styles
            GlobalStylesNotFound: reference is nested too deep to be a theme
            ThemeNotFound: no theme is installed at the reference
        """
        self._require(Capability.MANAGE_GLOBAL_STYLES, CannotManageGlobalStyles)

        if len(stylesheet.split("/")) > MAX_STYLESHEET_DEPTH:
            raise GlobalStylesNotFound()

        theme = self._get_theme(stylesheet)
        base = self.registry.load_base_styles(theme)
        return ThemeGlobalStylesResponse(settings=base["settings"], styles=base["styles"])

    def get_theme_style_variations(self, stylesheet: str) -> list[ThemeStyleVariation]:
        """
        List a theme's style variations.

        Raises:
            ThemeNotFound: no theme is installed at the reference
        """
        theme = self._get_theme(stylesheet)
        return list(self.registry.get_style_variations(theme))

    def _get_theme(self, stylesheet: str) -> ThemeHandle:
        theme = self.registry.resolve_theme(stylesheet)
        if theme is None:
            raise ThemeNotFound()
        return theme

    # =========================================================================
    # Permissions
    # =========================================================================

    def _require(self, capability: str, error: type[GlobalStylesError]) -> None:
        if not self.authorization.has_capability(capability):
            raise error(status_code=self.authorization.authorization_required_status())

    @property
    def _user_id(self) -> int | None:
        return self.authorization.user.user_id if self.authorization.user else None
