"""Pydantic models for Gerrit accounts and configured instances."""

from pydantic import BaseModel, ConfigDict, Field


class Account(BaseModel):
    """Gerrit account record (``/accounts/self`` or an embedded owner)."""

    model_config = ConfigDict(populate_by_name=True)

    account_id: int = Field(alias="_account_id")
    name: str | None = None
    email: str | None = None
    username: str | None = None

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class GerritInstance(BaseModel):
    """A configured Gerrit host."""
    host: str
    name: str
    enabled: bool = True
