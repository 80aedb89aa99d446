"""Request models for API routers."""
from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ContactCreateRequest(BaseModel):
    """Body for adding a contact. Tags may be a list or a comma-separated string."""
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    tags: Union[List[str], str] = Field(default_factory=list)


class ContactUpdateRequest(BaseModel):
    """Body for editing a contact; omitted fields keep their value."""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    tags: Optional[Union[List[str], str]] = None


class BulkDeleteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ids: List[str] = Field(default_factory=list, alias="contactIds")


class ImportRequest(BaseModel):
    format: Literal["csv", "json"]
    content: str = Field(..., description="Raw file contents.")
