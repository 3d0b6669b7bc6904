"""JSON export and import of a user's prompt library."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from prompt_tools.models.base import utcnow
from prompt_tools.models.prompt import Prompt, PromptVersion

from .errors import ImportFormatError
from .schemas import ExportDocument, ExportedPrompt

logger = logging.getLogger("prompt_tools.prompts.transfer")

EXPORT_VERSION = "1.0"


def _iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def export_library(db: Session, owner_id: str) -> Dict[str, Any]:
    """Every prompt of ``owner_id`` with its full version history."""
    prompts = db.scalars(
        select(Prompt).where(Prompt.user_id == owner_id).order_by(Prompt.created_at)
    ).all()

    exported: List[Dict[str, Any]] = []
    for prompt in prompts:
        versions = db.scalars(
            select(PromptVersion)
            .where(PromptVersion.prompt_id == prompt.id)
            .order_by(PromptVersion.created_at.desc(), PromptVersion.sequence.desc())
        ).all()
        exported.append(
            {
                "id": str(prompt.id),
                "name": prompt.name,
                "source": prompt.source,
                "notes": prompt.notes,
                "tags": list(prompt.tags or []),
                "pinned": prompt.pinned,
                "createdAt": _iso(prompt.created_at),
                "updatedAt": _iso(prompt.updated_at),
                "currentVersionId": str(prompt.current_version_id) if prompt.current_version_id else None,
                "versions": [
                    {
                        "id": str(v.id),
                        "version": v.version,
                        "content": v.content,
                        "createdAt": _iso(v.created_at),
                        "parentVersionId": str(v.parent_version_id) if v.parent_version_id else None,
                    }
                    for v in versions
                ],
            }
        )

    return {
        "exportVersion": EXPORT_VERSION,
        "exportedAt": datetime.now(timezone.utc).isoformat(),
        "prompts": exported,
    }


def import_library(db: Session, owner_id: str, data: Any) -> List[Prompt]:
    """Re-create exported prompts for ``owner_id`` with fresh identifiers.

    Parent and current-version pointers are remapped to the new rows. The
    whole document is written in one transaction.
    """
    try:
        document = ExportDocument.model_validate(data)
    except ValidationError as exc:
        raise ImportFormatError(str(exc)) from exc

    created: List[Prompt] = []
    try:
        for item in document.prompts:
            created.append(_import_prompt(db, owner_id, item))
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ImportFormatError(f"duplicate version strings in import: {exc.orig}") from exc
    except SQLAlchemyError:
        db.rollback()
        raise
    except ImportFormatError:
        db.rollback()
        raise

    for prompt in created:
        db.refresh(prompt)
    logger.info("Imported %d prompts for owner=%s", len(created), owner_id)
    return created


def _import_prompt(db: Session, owner_id: str, item: ExportedPrompt) -> Prompt:
    if not item.versions:
        raise ImportFormatError(f"prompt {item.name!r} has no versions")

    prompt = Prompt(
        user_id=owner_id,
        name=item.name,
        source=item.source,
        notes=item.notes,
        tags=list(item.tags),
        pinned=item.pinned,
    )
    db.add(prompt)
    db.flush()

    # oldest first so parents exist before their children, undated versions last
    ordered = sorted(
        enumerate(item.versions),
        key=lambda pair: (pair[1].created_at is None, _sortable(pair[1].created_at), -pair[0]),
    )
    dated = [_aware(v.created_at) for v in item.versions if v.created_at is not None]
    # undated versions are stamped no earlier than the newest dated one
    undated_at = max(dated + [utcnow()])
    id_map: Dict[str, uuid.UUID] = {}
    rows: List[PromptVersion] = []
    for sequence, (_, exported) in enumerate(ordered, start=1):
        row = PromptVersion(
            id=uuid.uuid4(),
            prompt_id=prompt.id,
            version=exported.version,
            content=exported.content,
            sequence=sequence,
        )
        row.created_at = _aware(exported.created_at) if exported.created_at is not None else undated_at
        if exported.id:
            id_map[exported.id] = row.id
        rows.append(row)
        db.add(row)
    db.flush()

    for row, (_, exported) in zip(rows, ordered):
        if exported.parent_version_id:
            row.parent_version_id = id_map.get(exported.parent_version_id)

    current = id_map.get(item.current_version_id or "")
    # fall back to the newest version when the pointer does not resolve
    prompt.current_version_id = current or rows[-1].id
    if item.created_at is not None:
        prompt.created_at = item.created_at
    if item.updated_at is not None:
        prompt.updated_at = item.updated_at
    return prompt


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _sortable(value: Optional[datetime]) -> float:
    if value is None:
        return 0.0
    return _aware(value).timestamp()
