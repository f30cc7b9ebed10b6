"""Authenticated principal.

Authentication happens upstream; the gateway forwards the resolved user in
``X-User-Id`` and ``X-User-Role`` headers.
"""

from dataclasses import dataclass

from fastapi import Depends, Header

from storefront.errors import Unauthorized

ADMIN_ROLE = "ADMIN"


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: str = "USER"

    @property
    def is_admin(self) -> bool:
        return self.role.upper() == ADMIN_ROLE


def get_principal(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Principal:
    if not x_user_id:
        raise Unauthorized("Authentication required")
    return Principal(user_id=x_user_id, role=x_user_role or "USER")


def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    if not principal.is_admin:
        raise Unauthorized("Administrator role required", user_id=principal.user_id)
    return principal
