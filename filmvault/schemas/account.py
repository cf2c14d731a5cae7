"""Account Schemas — request payloads for account endpoints.

Invariants:
    - name: 1-100 chars after stripping
    - email shape, lowercasing and uniqueness are enforced by AccountService
    - AccountUpdate requires at least one field; absent fields stay absent
"""

from pydantic import BaseModel, Field, field_validator, model_validator


class AccountCreate(BaseModel):
    """Account registration payload; account_id is optional and caller-chosen."""
    email: str = Field(min_length=3, max_length=320)
    name: str = Field(min_length=1, max_length=100)
    account_id: str | None = Field(None, min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v

    @field_validator("email")
    @classmethod
    def strip_email(cls, v: str) -> str:
        return v.strip()


class AccountUpdate(BaseModel):
    """Partial account update."""
    email: str | None = Field(None, min_length=3, max_length=320)
    name: str | None = Field(None, max_length=100)

    @model_validator(mode="after")
    def require_one_field(self):
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided")
        for name in self.model_fields_set:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self
