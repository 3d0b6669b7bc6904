"""Library-wide endpoints: categories, facets, stats, export and import."""

from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from prompt_tools.api.dependencies import get_current_user_id
from prompt_tools.core.config import settings
from prompt_tools.core.database import get_db
from prompt_tools.prompts import PromptLibrary, get_classifier
from prompt_tools.prompts.schemas import ImportResult, LibraryStats
from prompt_tools.prompts.transfer import export_library, import_library
from prompt_tools.services.audit_service import log_prompt_event

router = APIRouter(tags=["library"])


@router.get("/categories", response_model=Dict[str, int])
def category_counts(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Number of the caller's prompts in each navigation category."""
    prompts = [prompt for prompt, _ in PromptLibrary(db).prompts_with_content(user_id)]
    return get_classifier().category_counts(prompts)


@router.get("/tags", response_model=List[str])
def list_tags(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return PromptLibrary(db).all_tags(user_id)


@router.get("/sources", response_model=List[str])
def list_sources(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return PromptLibrary(db).all_sources(user_id)


@router.get("/stats", response_model=LibraryStats)
def library_stats(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return PromptLibrary(db).stats(user_id, recent_days=settings.RECENT_ACTIVITY_DAYS)


@router.get("/export")
def export_prompts(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Download every prompt and version as a JSON document."""
    filename = f"prompts-export-{datetime.now(timezone.utc).date().isoformat()}.json"
    return JSONResponse(
        content=export_library(db, user_id),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import", response_model=ImportResult)
def import_prompts(
    document: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Add the prompts of an export document to the caller's library."""
    created = import_library(db, user_id, document)
    log_prompt_event(
        db,
        user_id=user_id,
        action_type="IMPORT",
        resource_id=None,
        new_data={"prompts": [str(p.id) for p in created]},
    )
    return ImportResult(imported=len(created), prompt_ids=[p.id for p in created])
