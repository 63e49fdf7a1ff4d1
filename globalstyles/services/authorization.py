"""
Authorization Service

Capability checks for the caller of a request.

Capabilities come in two kinds:

1. Primitive capabilities
   - Granted to roles (administrator, editor, ...)
   - Super admins hold every primitive capability

2. Meta capabilities
   - Named after an operation on a resource (view_global_styles, ...)
   - Mapped onto the primitive capability that guards them

In multisite deployments custom CSS may carry arbitrary markup into every
site, so edit_css is held by super admins only.
"""

import logging

from fastapi import status

from globalstyles.core.auth import UserPrincipal
from globalstyles.models import UserRoleName

logger = logging.getLogger(__name__)


class Capability:
    """Capability names checked by the API."""

    READ = "read"
    EDIT_POSTS = "edit_posts"
    PUBLISH_POSTS = "publish_posts"
    EDIT_THEME_OPTIONS = "edit_theme_options"
    EDIT_CSS = "edit_css"

    VIEW_GLOBAL_STYLES = "view_global_styles"
    EDIT_GLOBAL_STYLES = "edit_global_styles"
    MANAGE_GLOBAL_STYLES = "manage_global_styles"
    PUBLISH_GLOBAL_STYLES = "publish_global_styles"


ROLE_CAPABILITIES: dict[str, frozenset[str]] = {
    UserRoleName.ADMINISTRATOR: frozenset({
        Capability.READ,
        Capability.EDIT_POSTS,
        Capability.PUBLISH_POSTS,
        Capability.EDIT_THEME_OPTIONS,
        Capability.EDIT_CSS,
    }),
    UserRoleName.EDITOR: frozenset({
        Capability.READ,
        Capability.EDIT_POSTS,
        Capability.PUBLISH_POSTS,
    }),
    UserRoleName.AUTHOR: frozenset({
        Capability.READ,
        Capability.EDIT_POSTS,
        Capability.PUBLISH_POSTS,
    }),
    UserRoleName.CONTRIBUTOR: frozenset({
        Capability.READ,
        Capability.EDIT_POSTS,
    }),
    UserRoleName.SUBSCRIBER: frozenset({
        Capability.READ,
    }),
}

# Global styles are theme options: every operation on them is guarded by
# edit_theme_options.
META_CAPABILITIES: dict[str, str] = {
    Capability.VIEW_GLOBAL_STYLES: Capability.EDIT_THEME_OPTIONS,
    Capability.EDIT_GLOBAL_STYLES: Capability.EDIT_THEME_OPTIONS,
    Capability.MANAGE_GLOBAL_STYLES: Capability.EDIT_THEME_OPTIONS,
    Capability.PUBLISH_GLOBAL_STYLES: Capability.EDIT_THEME_OPTIONS,
}

SUPER_ADMIN_ONLY_IN_MULTISITE = frozenset({Capability.EDIT_CSS})


class AuthorizationService:
    """
    Service for checking caller capabilities.

    This service is stateless and operates on the provided caller.
    """

    def __init__(self, user: UserPrincipal | None, multisite: bool = False):
        """
        Initialize authorization service.

        Args:
            user: Authenticated caller, or None for anonymous requests
            multisite: Whether the deployment serves multiple sites
        """
        self.user = user
        self.multisite = multisite

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def has_capability(self, capability: str) -> bool:
        """
        Check whether the caller holds a capability.

        Args:
            capability: Primitive or meta capability name

        Returns:
            True if the caller holds the capability
        """
        if self.user is None:
            return False

        if self.user.is_super_admin:
            return True

        primitive = META_CAPABILITIES.get(capability, capability)

        if self.multisite and primitive in SUPER_ADMIN_ONLY_IN_MULTISITE:
            return False

        return primitive in ROLE_CAPABILITIES.get(self.user.role, frozenset())

    def authorization_required_status(self) -> int:
        """
        Status code for a failed permission check.

        401 when the caller could authenticate and retry, 403 when the
        authenticated caller lacks the capability.
        """
        if self.is_authenticated:
            return status.HTTP_403_FORBIDDEN
        return status.HTTP_401_UNAUTHORIZED
