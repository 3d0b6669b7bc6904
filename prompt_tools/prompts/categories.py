"""Navigation categories derived from prompt tags.

A prompt belongs to a category when one of its tags contains one of the
category keywords, or a keyword contains the tag (case-insensitive). Two
synthetic categories exist on top of the keyword table: ``all`` matches
every prompt and ``pinned`` matches pinned prompts.
"""

from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Set, TypeVar

ALL_CATEGORY = "all"
PINNED_CATEGORY = "pinned"

DEFAULT_CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "work": ["职业", "工作", "职场", "career", "job"],
    "business": ["商业", "商务", "business", "marketing", "销售"],
    "tools": ["工具", "tool", "效率", "productivity"],
    "language": ["语言", "翻译", "language", "translate", "英语"],
    "office": ["办公", "office", "文档", "excel", "ppt"],
    "general": ["通用", "general", "日常", "常用"],
    "writing": ["写作", "文案", "writing", "content", "创作"],
    "programming": ["编程", "代码", "programming", "code", "开发"],
    "emotion": ["情感", "心理", "emotion", "情绪"],
    "education": ["教育", "学习", "education", "teaching", "培训"],
    "creative": ["创意", "创新", "creative", "设计思维"],
    "academic": ["学术", "研究", "academic", "论文"],
    "design": ["设计", "UI", "UX", "design", "视觉"],
    "tech": ["技术", "科技", "tech", "AI", "人工智能"],
    "entertainment": ["娱乐", "游戏", "entertainment", "fun"],
}


class Taggable(Protocol):
    tags: Sequence[str]
    pinned: bool


T = TypeVar("T", bound=Taggable)


def tag_matches_keyword(tag: str, keyword: str) -> bool:
    tag, keyword = tag.lower(), keyword.lower()
    if not tag or not keyword:
        return False
    return keyword in tag or tag in keyword


class CategoryClassifier:
    """Assigns prompts to categories from a fixed keyword table."""

    def __init__(self, keywords: Optional[Mapping[str, Iterable[str]]] = None):
        table = DEFAULT_CATEGORY_KEYWORDS if keywords is None else keywords
        self.keywords: Dict[str, List[str]] = {name: list(words) for name, words in table.items()}

    @property
    def category_names(self) -> List[str]:
        return [ALL_CATEGORY, PINNED_CATEGORY, *self.keywords]

    def matches(self, prompt: Taggable, category: str) -> bool:
        if category == ALL_CATEGORY:
            return True
        if category == PINNED_CATEGORY:
            return bool(prompt.pinned)

        keywords = self.keywords.get(category)
        if not keywords:
            return False
        return any(
            tag_matches_keyword(tag, keyword)
            for tag in (prompt.tags or [])
            for keyword in keywords
        )

    def categories_for(self, prompt: Taggable) -> Set[str]:
        return {name for name in self.category_names if self.matches(prompt, name)}

    def filter_prompts(self, prompts: Iterable[T], category: str) -> List[T]:
        return [p for p in prompts if self.matches(p, category)]

    def category_counts(self, prompts: Iterable[Taggable]) -> Dict[str, int]:
        """Number of prompts per category, zero counts included."""
        prompts = list(prompts)
        return {name: len(self.filter_prompts(prompts, name)) for name in self.category_names}


def get_classifier() -> CategoryClassifier:
    """Classifier for the configured keyword table."""
    from prompt_tools.core.config import settings

    return CategoryClassifier(settings.CATEGORY_KEYWORDS)
