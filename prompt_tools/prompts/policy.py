"""Decide how a content edit lands in a prompt's version history."""

import enum
import uuid
from dataclasses import dataclass
from typing import Optional

from .semver import BumpKind, bump_version


class EditAction(str, enum.Enum):
    MUTATE = "mutate"
    CREATE = "create"


@dataclass(frozen=True)
class CurrentVersion:
    """The part of the current version the policy needs."""

    id: uuid.UUID
    version: str
    content: str


@dataclass(frozen=True)
class EditDecision:
    action: EditAction
    content: str
    # MUTATE: the row to overwrite. CREATE: the new row's parent.
    base_version_id: uuid.UUID
    # Version string the prompt ends up on
    version: str
    previous_version: str
    previous_content: str

    @property
    def creates_version(self) -> bool:
        return self.action == EditAction.CREATE

    @property
    def parent_version_id(self) -> Optional[uuid.UUID]:
        return self.base_version_id if self.creates_version else None


def decide_edit(
    current: CurrentVersion,
    content: str,
    save_as_version: bool = False,
    bump: Optional[str] = BumpKind.PATCH,
) -> EditDecision:
    """Mutate the current version in place, or mint its bumped successor."""
    if not save_as_version:
        return EditDecision(
            action=EditAction.MUTATE,
            content=content,
            base_version_id=current.id,
            version=current.version,
            previous_version=current.version,
            previous_content=current.content,
        )

    return EditDecision(
        action=EditAction.CREATE,
        content=content,
        base_version_id=current.id,
        version=bump_version(current.version, bump),
        previous_version=current.version,
        previous_content=current.content,
    )


def decide_rollback(
    current: CurrentVersion,
    target_id: uuid.UUID,
    target_content: str,
    bump: Optional[str] = BumpKind.PATCH,
) -> EditDecision:
    """Restore an older version's content as a new version derived from it."""
    return EditDecision(
        action=EditAction.CREATE,
        content=target_content,
        base_version_id=target_id,
        version=bump_version(current.version, bump),
        previous_version=current.version,
        previous_content=current.content,
    )
