"""Item Schemas — Pydantic models with field-level validation for catalog endpoints.

Invariants:
    - ItemCreate.title: 1-255 chars, stripped, non-empty
    - ItemCreate.description: 1-1000 chars, stripped, non-empty
    - price: integer 0-999999 (smallest currency unit)
    - content_url: absolute http(s) URL
    - ItemUpdate requires at least one field; absent fields stay absent

Design Decisions:
    - field_validator for side-effect-free transforms (strip), keeping models pure
    - AnyHttpUrl for content_url: format check only, the URL is never fetched
"""

from pydantic import AnyHttpUrl, BaseModel, Field, field_validator, model_validator

MAX_PRICE = 999_999


def _strip_required(v: str | None, field: str) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError(f"{field} cannot be empty or whitespace")
    return v


class ItemCreate(BaseModel):
    """Item registration payload."""
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1, max_length=1000)
    price: int = Field(ge=0, le=MAX_PRICE)
    content_url: AnyHttpUrl
    registrant_id: str | None = Field(None, max_length=255)

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, v: str, info) -> str:
        return _strip_required(v, info.field_name)


class ItemUpdate(BaseModel):
    """Partial item update — only supplied fields are applied."""
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, min_length=1, max_length=1000)
    price: int | None = Field(None, ge=0, le=MAX_PRICE)
    content_url: AnyHttpUrl | None = None

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, v: str | None, info) -> str | None:
        return _strip_required(v, info.field_name)

    @model_validator(mode="after")
    def require_one_field(self):
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided")
        for name in self.model_fields_set:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class PurchaseRequest(BaseModel):
    """Purchase payload. account_id may instead come from the X-Account-Id header."""
    account_id: str | None = Field(None, min_length=1, max_length=255)
