"""Viewer identity value object."""

from __future__ import annotations

from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ViewerIdentity(BaseModel):
    """Who is watching: a signed-in user or an anonymous device.

    ``user_id`` and ``anonymous_id`` are mutually substitutable; a user id wins
    when both are present. The ``key`` is what unique-view accounting and the
    abuse heuristics group by.

    Examples:
        >>> ViewerIdentity(user_id="u-1").key
        'user:u-1'
        >>> ViewerIdentity(anonymous_id="device-9").key
        'anon:device-9'
    """

    model_config = ConfigDict(frozen=True)

    user_id: str | None = Field(default=None, description="Authenticated user id")
    anonymous_id: str | None = Field(
        default=None,
        description="Client-generated id for signed-out viewers",
    )

    @model_validator(mode="after")
    def _require_one(self) -> ViewerIdentity:
        if not self.user_id and not self.anonymous_id:
            raise ValueError("Either user_id or anonymous_id is required")
        return self

    @classmethod
    def resolve(
        cls,
        user_id: str | None = None,
        anonymous_id: str | None = None,
    ) -> ViewerIdentity:
        """Build an identity, generating an anonymous id when none is given."""
        if not user_id and not anonymous_id:
            anonymous_id = str(uuid4())
        return cls(user_id=user_id or None, anonymous_id=anonymous_id or None)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)

    @property
    def key(self) -> str:
        """Stable grouping key for this viewer."""
        if self.user_id:
            return f"user:{self.user_id}"
        return f"anon:{self.anonymous_id}"

    def __str__(self) -> str:
        return self.key
