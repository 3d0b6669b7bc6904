"""Prompt library endpoints."""

import math
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from prompt_tools.api.dependencies import get_current_user_id, parse_prompt_id
from prompt_tools.core import messages
from prompt_tools.core.config import settings
from prompt_tools.core.database import get_db
from prompt_tools.prompts import PromptLibrary, get_classifier
from prompt_tools.prompts.schemas import (
    Pagination,
    PinResponse,
    PromptCreate,
    PromptDetailResponse,
    PromptListResponse,
    PromptResponse,
    PromptUpdate,
    RollbackRequest,
    VersionResponse,
)
from prompt_tools.services import prompt_service

router = APIRouter(prefix="/prompts", tags=["prompts"])


def _split(value: Optional[str]) -> List[str]:
    return [part.strip() for part in (value or "").split(",") if part.strip()]


@router.get("", response_model=PromptListResponse)
def list_prompts(
    search: Optional[str] = None,
    tags: Optional[str] = Query(None, description="Comma separated, matches any"),
    sources: Optional[str] = Query(None, description="Comma separated, matches any"),
    pinned: Optional[bool] = None,
    category: Optional[str] = None,
    sort_by: str = Query("updatedAt", alias="sortBy", pattern="^(createdAt|updatedAt|name)$"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """List the caller's prompts with search, filters, sorting and pagination."""
    library = PromptLibrary(db)
    classifier = get_classifier()
    filters = dict(
        query=search or "",
        tags=_split(tags),
        sources=_split(sources),
        pinned=pinned,
        sort_by=sort_by,
        sort_order=sort_order,
    )

    if category:
        # categories are derived from tags, so they are matched after the query
        rows = [
            row for row in library.search(user_id, **filters)
            if classifier.matches(row[0], category)
        ]
        total = len(rows)
        start = (page - 1) * limit
        rows = rows[start:start + limit]
    else:
        rows, total = library.search_page(user_id, page=page, limit=limit, **filters)

    page_views = prompt_service.search_views(rows, library.version_counts(user_id))

    return PromptListResponse(
        prompts=[prompt_service.build_response(v, classifier) for v in page_views],
        pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
    )


@router.post("", response_model=PromptResponse, status_code=status.HTTP_201_CREATED)
def create_prompt(
    payload: PromptCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Create a prompt with its initial version 1.0.0."""
    view = prompt_service.create_prompt(db, user_id, payload)
    return prompt_service.build_response(view)


@router.get("/{prompt_id}", response_model=PromptDetailResponse)
def get_prompt(
    prompt_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Get a prompt with its current version and most recent versions."""
    return prompt_service.get_prompt_detail(
        db, user_id, parse_prompt_id(prompt_id), recent_limit=settings.RECENT_VERSIONS_LIMIT
    )


@router.put("/{prompt_id}", response_model=PromptResponse)
def update_prompt(
    prompt_id: str,
    payload: PromptUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Update a prompt; ``saveAsVersion`` commits the content as a new version."""
    view = prompt_service.update_prompt(db, user_id, parse_prompt_id(prompt_id), payload)
    return prompt_service.build_response(view)


@router.delete("/{prompt_id}")
def delete_prompt(
    prompt_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Delete a prompt and all of its versions."""
    prompt_service.delete_prompt(db, user_id, parse_prompt_id(prompt_id))
    return {"message": messages.PROMPT_DELETED}


@router.post("/{prompt_id}/pin", response_model=PinResponse)
def toggle_pin(
    prompt_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    prompt = prompt_service.toggle_pin(db, user_id, parse_prompt_id(prompt_id))
    return PinResponse(id=prompt.id, pinned=prompt.pinned)


@router.get("/{prompt_id}/versions", response_model=List[VersionResponse])
def list_versions(
    prompt_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Full version history, newest first."""
    return prompt_service.list_versions(db, user_id, parse_prompt_id(prompt_id))


@router.post("/{prompt_id}/rollback", response_model=PromptResponse)
def rollback_prompt(
    prompt_id: str,
    payload: RollbackRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Restore an older version's content as a new version."""
    view = prompt_service.rollback_prompt(
        db, user_id, parse_prompt_id(prompt_id), payload.version_id, payload.version_type
    )
    return prompt_service.build_response(view)
