"""
Request-scoped edit mode capability.

Public routes render content either read-only or editable. The choice is
made once per request from the admin token and the `edit` query flag,
and passed explicitly to the renderers.
"""
from dataclasses import dataclass
from typing import Optional
import logging

from fastapi import Header, HTTPException, Query, Request

from portfolio_site.utils.jwt_auth import ADMIN_ROLE, token_from_request, verify_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditMode:
    """Capability flag: is the caller an admin, and did they ask to edit."""
    is_admin: bool = False
    enabled: bool = False

    @property
    def can_edit(self) -> bool:
        return self.is_admin and self.enabled


READ_ONLY = EditMode()


def get_edit_mode(
    request: Request,
    edit: bool = Query(False, description="Request editable rendering (admins only)"),
    authorization: Optional[str] = Header(None),
) -> EditMode:
    """
    FastAPI dependency resolving the edit mode of a public request.
    Missing or invalid tokens fall back to read-only rendering.
    """
    token = token_from_request(request, authorization)
    if not token:
        return READ_ONLY

    try:
        payload = verify_token(token)
    except HTTPException:
        logger.debug("Ignoring invalid token on public request")
        return READ_ONLY

    is_admin = payload.get("role") == ADMIN_ROLE
    return EditMode(is_admin=is_admin, enabled=edit and is_admin)
