"""Community Schemas — create, join and message-post request bodies.

Invariants:
    - All strings are whitespace-stripped before length checks
    - CommunityCreate.name: 1-100 chars after stripping
    - MessageCreate.text: 1-2000 chars after stripping
    - Identity fields (creatorId, userId, senderId) must be non-empty

Design Decisions:
    - str_strip_whitespace on the model: stripping happens before constraints,
      so "   " fails min_length instead of slipping through
    - populate_by_name: tests and internal callers may use snake_case
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

_BODY_CONFIG = ConfigDict(str_strip_whitespace=True, populate_by_name=True)


class CommunityCreate(BaseModel):
    model_config = _BODY_CONFIG

    name: str = Field(min_length=1, max_length=100)
    description: str = Field("", max_length=500)
    creator_id: str = Field(alias="creatorId", min_length=1, max_length=64)

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, v):
        return "" if v is None else v


class JoinRequest(BaseModel):
    model_config = _BODY_CONFIG

    user_id: str = Field(alias="userId", min_length=1, max_length=64)
    code: str = Field(min_length=1, max_length=16)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        # Codes are uppercase-only; users often type them lowercase.
        return v.upper()


class MessageCreate(BaseModel):
    model_config = _BODY_CONFIG

    sender_id: str = Field(alias="senderId", min_length=1, max_length=64)
    text: str = Field(min_length=1, max_length=2000)
    sender_name: str | None = Field(None, alias="senderName", max_length=100)
