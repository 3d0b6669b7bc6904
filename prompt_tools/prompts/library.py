"""Owner-scoped queries over the prompt library."""

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from prompt_tools.models.prompt import Prompt, PromptVersion

SORT_COLUMNS = {
    "updatedAt": Prompt.updated_at,
    "createdAt": Prompt.created_at,
    "name": func.lower(Prompt.name),
}


class PromptLibrary:
    """Search, facets and statistics for one user's prompts."""

    def __init__(self, db: Session):
        self.db = db

    def prompts_with_content(self, owner_id: str) -> List[Tuple[Prompt, Optional[PromptVersion]]]:
        """Every prompt of the owner joined with its current version."""
        stmt = (
            select(Prompt, PromptVersion)
            .outerjoin(PromptVersion, PromptVersion.id == Prompt.current_version_id)
            .where(Prompt.user_id == owner_id)
        )
        return [(prompt, version) for prompt, version in self.db.execute(stmt)]

    def search(
        self,
        owner_id: str,
        query: str = "",
        tags: Iterable[str] = (),
        sources: Iterable[str] = (),
        pinned: Optional[bool] = None,
        sort_by: str = "updatedAt",
        sort_order: str = "desc",
    ) -> List[Tuple[Prompt, Optional[PromptVersion]]]:
        """Every matching prompt, ordered by the database.

        Tags are stored as a JSON list, so the tag filter runs on the
        ordered rows instead of in the query.
        """
        conditions = self._search_conditions(owner_id, query, sources, pinned)
        stmt = (
            select(Prompt, PromptVersion)
            .outerjoin(PromptVersion, PromptVersion.id == Prompt.current_version_id)
            .where(*conditions)
            .order_by(*_ordering(sort_by, sort_order))
        )
        rows = [(prompt, version) for prompt, version in self.db.execute(stmt)]

        tag_set = {t for t in tags if t}
        if tag_set:
            rows = [row for row in rows if tag_set.intersection(row[0].tags or [])]
        return rows

    def search_page(
        self,
        owner_id: str,
        query: str = "",
        tags: Iterable[str] = (),
        sources: Iterable[str] = (),
        pinned: Optional[bool] = None,
        sort_by: str = "updatedAt",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Tuple[Prompt, Optional[PromptVersion]]], int]:
        """One page of matching prompts and the total number of matches."""
        offset = (page - 1) * limit
        tags = [t for t in tags if t]
        if tags:
            rows = self.search(owner_id, query, tags, sources, pinned, sort_by, sort_order)
            return rows[offset:offset + limit], len(rows)

        conditions = self._search_conditions(owner_id, query, sources, pinned)
        total = self.db.scalar(
            select(func.count(Prompt.id))
            .select_from(Prompt)
            .outerjoin(PromptVersion, PromptVersion.id == Prompt.current_version_id)
            .where(*conditions)
        ) or 0
        stmt = (
            select(Prompt, PromptVersion)
            .outerjoin(PromptVersion, PromptVersion.id == Prompt.current_version_id)
            .where(*conditions)
            .order_by(*_ordering(sort_by, sort_order))
            .limit(limit)
            .offset(offset)
        )
        return [(prompt, version) for prompt, version in self.db.execute(stmt)], total

    def _search_conditions(
        self,
        owner_id: str,
        query: str,
        sources: Iterable[str],
        pinned: Optional[bool],
    ) -> list:
        conditions = [Prompt.user_id == owner_id]
        q = (query or "").strip()
        if q:
            like = f"%{q}%"
            conditions.append(
                or_(
                    Prompt.name.ilike(like),
                    Prompt.source.ilike(like),
                    Prompt.notes.ilike(like),
                    PromptVersion.content.ilike(like),
                )
            )
        source_list = [s for s in sources if s]
        if source_list:
            conditions.append(Prompt.source.in_(source_list))
        if pinned is not None:
            conditions.append(Prompt.pinned.is_(pinned))
        return conditions

    def version_counts(self, owner_id: str) -> Dict:
        """Number of versions per prompt id."""
        stmt = (
            select(PromptVersion.prompt_id, func.count(PromptVersion.id))
            .join(Prompt, Prompt.id == PromptVersion.prompt_id)
            .where(Prompt.user_id == owner_id)
            .group_by(PromptVersion.prompt_id)
        )
        return {prompt_id: count for prompt_id, count in self.db.execute(stmt)}

    def all_tags(self, owner_id: str) -> List[str]:
        tags = set()
        for (prompt_tags,) in self.db.execute(select(Prompt.tags).where(Prompt.user_id == owner_id)):
            tags.update(t for t in (prompt_tags or []) if isinstance(t, str) and t.strip())
        return sorted(tags)

    def all_sources(self, owner_id: str) -> List[str]:
        stmt = (
            select(Prompt.source)
            .where(Prompt.user_id == owner_id, Prompt.source.is_not(None), Prompt.source != "")
            .distinct()
        )
        return sorted(self.db.scalars(stmt))

    def stats(self, owner_id: str, recent_days: int = 7, now: Optional[datetime] = None) -> Dict[str, int]:
        now = now or datetime.now(timezone.utc)
        since = now - timedelta(days=recent_days)

        total_prompts = self.db.scalar(
            select(func.count(Prompt.id)).where(Prompt.user_id == owner_id)
        ) or 0
        pinned_prompts = self.db.scalar(
            select(func.count(Prompt.id)).where(Prompt.user_id == owner_id, Prompt.pinned.is_(True))
        ) or 0
        total_versions = self.db.scalar(
            select(func.count(PromptVersion.id))
            .join(Prompt, Prompt.id == PromptVersion.prompt_id)
            .where(Prompt.user_id == owner_id)
        ) or 0
        recent_activity = self.db.scalar(
            select(func.count(Prompt.id)).where(Prompt.user_id == owner_id, Prompt.updated_at >= since)
        ) or 0

        return {
            "totalPrompts": total_prompts,
            "pinnedPrompts": pinned_prompts,
            "totalVersions": total_versions,
            "recentActivity": recent_activity,
        }


def _ordering(sort_by: str, sort_order: str) -> list:
    column = SORT_COLUMNS.get(sort_by, Prompt.updated_at)
    if sort_order == "asc":
        return [column.asc(), Prompt.id.asc()]
    return [column.desc(), Prompt.id.desc()]
