"""Auth schemas."""

import enum
from uuid import UUID

from pydantic import BaseModel, Field


class PermissionAction(str, enum.Enum):
    """Permission actions carried in the access token."""
    PRODUCT_CREATE = "product:create"
    PRODUCT_READ = "product:read"
    PRODUCT_UPDATE = "product:update"
    PRODUCT_DELETE = "product:delete"


class CurrentUser(BaseModel):
    id: UUID
    role: str
    vendor_id: UUID
    permissions: list[str]


class TokenClaims(BaseModel):
    """Claims of a vendor access token; `exp` is checked by the decoder."""
    sub: UUID
    vendor_id: UUID
    role: str
    permissions: list[str] = Field(default_factory=list)

    def to_user(self) -> CurrentUser:
        return CurrentUser(
            id=self.sub,
            role=self.role,
            vendor_id=self.vendor_id,
            permissions=self.permissions,
        )
