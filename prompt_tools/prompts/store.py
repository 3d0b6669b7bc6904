"""Persistence of prompts and their version history.

The prompt's ``current_version_id`` is the single source of truth for what
is current. Every mutation writes version rows first and moves the pointer
last, inside one transaction, so a reader never sees a pointer to a version
that is not there yet.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from prompt_tools.models.base import utcnow
from prompt_tools.models.prompt import Prompt, PromptVersion

from .errors import NotFoundError, VersionConflictError
from .policy import CurrentVersion, EditAction, EditDecision, decide_rollback
from .semver import INITIAL_VERSION, BumpKind

logger = logging.getLogger("prompt_tools.prompts.store")

METADATA_FIELDS = ("name", "source", "notes", "tags", "pinned")


@dataclass
class PromptView:
    """A prompt together with its resolved current version."""

    prompt: Prompt
    current_version: PromptVersion
    version_count: int

    @property
    def content(self) -> str:
        return self.current_version.content

    @property
    def version(self) -> str:
        return self.current_version.version


class VersionStore:
    """Reads and writes prompts and their versions through one session."""

    def __init__(self, db: Session):
        self.db = db

    # ----------------- reads -----------------
    def get_prompt(self, prompt_id: uuid.UUID, owner_id: Optional[str] = None) -> Prompt:
        """Load a prompt; a prompt owned by someone else counts as missing."""
        prompt = self.db.get(Prompt, prompt_id)
        if prompt is None or (owner_id is not None and prompt.user_id != owner_id):
            raise NotFoundError("prompt", prompt_id)
        return prompt

    def get_current_version(self, prompt: Prompt) -> PromptVersion:
        version = None
        if prompt.current_version_id is not None:
            version = self.db.get(PromptVersion, prompt.current_version_id)
        if version is None or version.prompt_id != prompt.id:
            raise NotFoundError("version", prompt.current_version_id)
        return version

    def get_version(self, prompt_id: uuid.UUID, version_id: uuid.UUID) -> PromptVersion:
        version = self.db.get(PromptVersion, version_id)
        if version is None or version.prompt_id != prompt_id:
            raise NotFoundError("version", version_id)
        return version

    def current(self, prompt_id: uuid.UUID) -> CurrentVersion:
        """Current version of a prompt in the shape the edit policy expects."""
        version = self.get_current_version(self.get_prompt(prompt_id))
        return CurrentVersion(id=version.id, version=version.version, content=version.content)

    def list_versions(self, prompt_id: uuid.UUID) -> List[PromptVersion]:
        """All versions of a prompt, newest first."""
        self.get_prompt(prompt_id)
        stmt = (
            select(PromptVersion)
            .where(PromptVersion.prompt_id == prompt_id)
            .order_by(PromptVersion.created_at.desc(), PromptVersion.sequence.desc())
        )
        return list(self.db.scalars(stmt))

    def count_versions(self, prompt_id: uuid.UUID) -> int:
        stmt = select(func.count(PromptVersion.id)).where(PromptVersion.prompt_id == prompt_id)
        return self.db.scalar(stmt) or 0

    def view(self, prompt: Prompt) -> PromptView:
        return PromptView(
            prompt=prompt,
            current_version=self.get_current_version(prompt),
            version_count=self.count_versions(prompt.id),
        )

    # ----------------- writes ----------------
    def create_prompt(
        self,
        owner_id: str,
        name: str,
        content: str,
        source: Optional[str] = None,
        notes: Optional[str] = None,
        tags: Optional[List[str]] = None,
        pinned: bool = False,
    ) -> PromptView:
        """Create a prompt together with its seed version 1.0.0."""
        prompt = Prompt(
            user_id=owner_id,
            name=name,
            source=source,
            notes=notes,
            tags=list(tags or []),
            pinned=pinned,
        )
        try:
            self.db.add(prompt)
            self.db.flush()
            self.create_initial_version(prompt.id, content, commit=False)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        self.db.refresh(prompt)
        logger.info("Prompt created: id=%s owner=%s", prompt.id, owner_id)
        return self.view(prompt)

    def create_initial_version(
        self, prompt_id: uuid.UUID, content: str, commit: bool = True
    ) -> PromptVersion:
        """Write the seed version, then point the prompt at it."""
        prompt = self.get_prompt(prompt_id)
        version = self._insert_version(prompt, INITIAL_VERSION, content, parent_version_id=None)
        prompt.current_version_id = version.id
        if commit:
            self._commit(prompt.id, INITIAL_VERSION)
        return version

    def apply_edit(
        self,
        prompt_id: uuid.UUID,
        decision: EditDecision,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> PromptView:
        """Carry out an edit decision, optionally with metadata changes, as one unit."""
        prompt = self.get_prompt(prompt_id)
        self._check_metadata(metadata)
        current = self.get_current_version(prompt)

        if decision.action == EditAction.MUTATE:
            # a version was committed since the decision was made
            if current.id != decision.base_version_id:
                raise VersionConflictError(prompt.id, current.version)
            current.content = decision.content
            self._apply_metadata(prompt, metadata)
        else:
            target = self._insert_version(
                prompt, decision.version, decision.content, decision.parent_version_id
            )
            self._apply_metadata(prompt, metadata)
            # pointer last
            prompt.current_version_id = target.id
        prompt.updated_at = utcnow()
        self._commit(prompt.id, decision.version)

        self.db.refresh(prompt)
        logger.info(
            "Prompt edited: id=%s action=%s version=%s",
            prompt.id,
            decision.action.value,
            decision.version,
        )
        return self.view(prompt)

    def rollback(
        self,
        prompt_id: uuid.UUID,
        target_version_id: uuid.UUID,
        bump: Optional[str] = BumpKind.PATCH,
    ) -> PromptView:
        """Make an older version's content current again, as a new version."""
        target = self.get_version(prompt_id, target_version_id)
        decision = decide_rollback(self.current(prompt_id), target.id, target.content, bump)
        return self.apply_edit(prompt_id, decision)

    def update_metadata(self, prompt_id: uuid.UUID, **fields: Any) -> Prompt:
        prompt = self.get_prompt(prompt_id)
        self._apply_metadata(prompt, fields)
        prompt.updated_at = utcnow()
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(prompt)
        return prompt

    def toggle_pin(self, prompt_id: uuid.UUID) -> Prompt:
        prompt = self.get_prompt(prompt_id)
        return self.update_metadata(prompt_id, pinned=not prompt.pinned)

    def delete_prompt(self, prompt_id: uuid.UUID) -> None:
        """Delete a prompt and every version it owns as a single transaction."""
        prompt = self.get_prompt(prompt_id)
        try:
            prompt.current_version_id = None
            self.db.flush()
            removed = self.db.query(PromptVersion).filter(
                PromptVersion.prompt_id == prompt.id
            ).delete(synchronize_session=False)
            self.db.delete(prompt)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        logger.info("Prompt deleted: id=%s versions=%s", prompt_id, removed)

    # ----------------- internals -------------
    def _insert_version(
        self,
        prompt: Prompt,
        version: str,
        content: str,
        parent_version_id: Optional[uuid.UUID],
    ) -> PromptVersion:
        last = self.db.scalar(
            select(func.max(PromptVersion.sequence)).where(PromptVersion.prompt_id == prompt.id)
        )
        row = PromptVersion(
            prompt_id=prompt.id,
            version=version,
            content=content,
            parent_version_id=parent_version_id,
            sequence=(last or 0) + 1,
        )
        self.db.add(row)
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            raise VersionConflictError(prompt.id, version)
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return row

    def _check_metadata(self, fields: Optional[Dict[str, Any]]) -> None:
        unknown = set(fields or {}) - set(METADATA_FIELDS)
        if unknown:
            raise ValueError(f"Unknown prompt fields: {sorted(unknown)}")

    def _apply_metadata(self, prompt: Prompt, fields: Optional[Dict[str, Any]]) -> None:
        self._check_metadata(fields)
        for key, value in (fields or {}).items():
            if key == "tags":
                value = list(value or [])
            setattr(prompt, key, value)

    def _commit(self, prompt_id: uuid.UUID, version: str) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise VersionConflictError(prompt_id, version)
        except SQLAlchemyError:
            self.db.rollback()
            raise
