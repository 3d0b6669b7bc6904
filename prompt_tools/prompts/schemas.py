"""Pydantic schemas for the prompt library API and export format."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .semver import BumpKind


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class PromptCreate(CamelModel):
    """Schema for creating a prompt."""
    name: str = Field(..., min_length=1, max_length=100)
    content: str = Field(..., min_length=1)
    source: Optional[str] = None
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class PromptUpdate(PromptCreate):
    """Schema for updating a prompt, optionally as a new version."""
    save_as_version: bool = False
    version_type: BumpKind = BumpKind.PATCH


class RollbackRequest(CamelModel):
    version_id: UUID
    version_type: BumpKind = BumpKind.PATCH


class VersionResponse(CamelModel):
    id: UUID
    version: str
    content: str
    created_at: datetime
    parent_version_id: Optional[UUID] = None


class PromptResponse(CamelModel):
    id: UUID
    name: str
    source: Optional[str] = None
    notes: Optional[str] = None
    tags: List[str]
    pinned: bool
    created_at: datetime
    updated_at: datetime
    current_version_id: UUID
    current_version: VersionResponse
    version_count: int
    categories: List[str] = Field(default_factory=list)


class PromptDetailResponse(PromptResponse):
    """Prompt with its most recent versions."""
    versions: List[VersionResponse]


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class PromptListResponse(BaseModel):
    prompts: List[PromptResponse]
    pagination: Pagination


class PinResponse(CamelModel):
    id: UUID
    pinned: bool


class LibraryStats(CamelModel):
    total_prompts: int
    pinned_prompts: int
    total_versions: int
    recent_activity: int


class ImportResult(CamelModel):
    imported: int
    prompt_ids: List[UUID]


# ==================== Export format ====================

class ExportedVersion(CamelModel):
    id: Optional[str] = None
    version: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    created_at: Optional[datetime] = None
    parent_version_id: Optional[str] = None


class ExportedPrompt(CamelModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=100)
    source: Optional[str] = None
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    pinned: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    current_version_id: Optional[str] = None
    versions: List[ExportedVersion] = Field(default_factory=list)


class ExportDocument(CamelModel):
    export_version: str = "1.0"
    exported_at: Optional[datetime] = None
    prompts: List[ExportedPrompt]
