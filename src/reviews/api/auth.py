"""Caller identity for API requests.

The storefront's session layer authenticates the user and forwards who they
are in ``X-User-Id`` / ``X-User-Role``; the review service only sees the
resulting ``Caller``.
"""

from fastapi import Depends, Header

from reviews.errors import Forbidden, Unauthorized
from reviews.review.service import Caller

ADMIN_ROLE = "admin"


def get_caller(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Caller:
    return Caller(
        user_id=x_user_id or None,
        is_admin=(x_user_role or "").strip().lower() == ADMIN_ROLE,
    )


def require_admin(caller: Caller = Depends(get_caller)) -> Caller:
    if not caller.is_authenticated:
        raise Unauthorized("Authentication required")
    if not caller.is_admin:
        raise Forbidden("Admin access required")
    return caller
