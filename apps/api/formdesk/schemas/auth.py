"""Authentication schemas."""

from pydantic import BaseModel, Field


class AuthPrincipal(BaseModel):
    """Authenticated caller identity as yielded by the identity provider.

    Role and ban state are deliberately absent; they live on the profile.
    """

    user_id: str = Field(min_length=1)
