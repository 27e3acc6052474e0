"""
Caller identity provided by the upstream auth layer

Session issuance happens outside this service. The auth layer in front of it
forwards the authenticated user in headers, which this service trusts.
"""

from typing import Optional

from pydantic import BaseModel, Field

USER_ID_HEADER = "X-User-Id"
USER_NAME_HEADER = "X-User-Name"


class AuthenticatedUser(BaseModel):
    """Authenticated caller"""
    id: str = Field(..., description="Stable user identifier")
    full_name: Optional[str] = Field(default=None, description="Display name, if known")

    @property
    def display_name(self) -> Optional[str]:
        return self.full_name or None
