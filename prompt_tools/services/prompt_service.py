"""Service layer tying the edit policy, the version store and the audit log together."""

import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from prompt_tools.models.prompt import Prompt, PromptVersion
from prompt_tools.prompts import (
    CategoryClassifier,
    PromptView,
    VersionStore,
    decide_edit,
    get_classifier,
)
from prompt_tools.prompts.schemas import (
    PromptCreate,
    PromptDetailResponse,
    PromptResponse,
    PromptUpdate,
    VersionResponse,
)
from prompt_tools.services.audit_service import log_prompt_event

logger = logging.getLogger("prompt_tools.services.prompt")


def _snapshot(prompt: Prompt, version: Optional[PromptVersion] = None, **overrides: Any) -> Dict[str, Any]:
    """JSON-safe before/after picture of a prompt for the audit log."""
    data = {
        "name": prompt.name,
        "source": prompt.source,
        "notes": prompt.notes,
        "tags": list(prompt.tags or []),
        "pinned": prompt.pinned,
    }
    if version is not None:
        data["content"] = version.content
        data["version"] = version.version
    data.update(overrides)
    return data


def build_response(view: PromptView, classifier: Optional[CategoryClassifier] = None) -> PromptResponse:
    classifier = classifier or get_classifier()
    prompt = view.prompt
    return PromptResponse(
        id=prompt.id,
        name=prompt.name,
        source=prompt.source,
        notes=prompt.notes,
        tags=list(prompt.tags or []),
        pinned=prompt.pinned,
        created_at=prompt.created_at,
        updated_at=prompt.updated_at,
        current_version_id=view.current_version.id,
        current_version=VersionResponse.model_validate(view.current_version),
        version_count=view.version_count,
        categories=sorted(classifier.categories_for(prompt)),
    )


def create_prompt(db: Session, user_id: str, data: PromptCreate) -> PromptView:
    store = VersionStore(db)
    view = store.create_prompt(
        owner_id=user_id,
        name=data.name,
        content=data.content,
        source=data.source,
        notes=data.notes,
        tags=data.tags,
    )
    log_prompt_event(
        db,
        user_id=user_id,
        action_type="CREATE",
        resource_id=view.prompt.id,
        new_data=_snapshot(view.prompt, view.current_version),
    )
    return view


def get_prompt_detail(db: Session, user_id: str, prompt_id: uuid.UUID, recent_limit: int = 5) -> PromptDetailResponse:
    store = VersionStore(db)
    prompt = store.get_prompt(prompt_id, owner_id=user_id)
    versions = store.list_versions(prompt.id)
    view = PromptView(prompt=prompt, current_version=store.get_current_version(prompt), version_count=len(versions))
    base = build_response(view)
    return PromptDetailResponse(
        **base.model_dump(),
        versions=[VersionResponse.model_validate(v) for v in versions[:recent_limit]],
    )


def list_versions(db: Session, user_id: str, prompt_id: uuid.UUID) -> List[PromptVersion]:
    store = VersionStore(db)
    store.get_prompt(prompt_id, owner_id=user_id)
    return store.list_versions(prompt_id)


def update_prompt(db: Session, user_id: str, prompt_id: uuid.UUID, data: PromptUpdate) -> PromptView:
    """Apply metadata changes and a content edit, in place or as a new version."""
    store = VersionStore(db)
    prompt = store.get_prompt(prompt_id, owner_id=user_id)
    old_data = _snapshot(prompt, store.get_current_version(prompt))

    decision = decide_edit(
        store.current(prompt.id),
        content=data.content,
        save_as_version=data.save_as_version,
        bump=data.version_type,
    )
    view = store.apply_edit(
        prompt.id,
        decision,
        metadata={
            "name": data.name,
            "source": data.source,
            "notes": data.notes,
            "tags": data.tags,
        },
    )
    log_prompt_event(
        db,
        user_id=user_id,
        action_type="UPDATE",
        resource_id=prompt.id,
        old_data=old_data,
        new_data=_snapshot(view.prompt, view.current_version, saveAsVersion=data.save_as_version),
    )
    return view


def rollback_prompt(
    db: Session,
    user_id: str,
    prompt_id: uuid.UUID,
    version_id: uuid.UUID,
    version_type: str,
) -> PromptView:
    store = VersionStore(db)
    prompt = store.get_prompt(prompt_id, owner_id=user_id)
    old_data = _snapshot(prompt, store.get_current_version(prompt))

    view = store.rollback(prompt.id, version_id, version_type)
    log_prompt_event(
        db,
        user_id=user_id,
        action_type="ROLLBACK",
        resource_type="VERSION",
        resource_id=prompt.id,
        old_data=old_data,
        new_data=_snapshot(view.prompt, view.current_version, restoredFrom=str(version_id)),
    )
    return view


def toggle_pin(db: Session, user_id: str, prompt_id: uuid.UUID) -> Prompt:
    store = VersionStore(db)
    was_pinned = store.get_prompt(prompt_id, owner_id=user_id).pinned

    prompt = store.toggle_pin(prompt_id)
    log_prompt_event(
        db,
        user_id=user_id,
        action_type="UPDATE",
        resource_id=prompt_id,
        old_data={"pinned": was_pinned},
        new_data={"pinned": prompt.pinned},
    )
    return prompt


def delete_prompt(db: Session, user_id: str, prompt_id: uuid.UUID) -> None:
    store = VersionStore(db)
    prompt = store.get_prompt(prompt_id, owner_id=user_id)
    old_data = _snapshot(prompt, store.get_current_version(prompt))

    store.delete_prompt(prompt.id)
    log_prompt_event(
        db,
        user_id=user_id,
        action_type="DELETE",
        resource_id=prompt_id,
        old_data=old_data,
    )


def search_views(
    rows: List[Tuple[Prompt, Optional[PromptVersion]]],
    counts: Dict[uuid.UUID, int],
) -> List[PromptView]:
    """Turn (prompt, current version) rows into views, skipping prompts without a resolvable version."""
    views = []
    for prompt, version in rows:
        if version is None:
            logger.warning("Prompt %s has no resolvable current version", prompt.id)
            continue
        views.append(PromptView(prompt=prompt, current_version=version, version_count=counts.get(prompt.id, 0)))
    return views
