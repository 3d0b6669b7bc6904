from datetime import datetime, timedelta, timezone

import pytest

from prompt_tools.models.prompt import Prompt
from prompt_tools.prompts import PromptLibrary, decide_edit


@pytest.fixture
def library(db):
    return PromptLibrary(db)


@pytest.fixture
def seeded(store):
    translator = store.create_prompt(
        owner_id="alice",
        name="Translator",
        content="Translate {text} into French",
        source="Internal",
        tags=["language", "translate"],
    )
    reviewer = store.create_prompt(
        owner_id="alice",
        name="Code reviewer",
        content="Review this diff",
        source="GitHub",
        notes="strict mode",
        tags=["code"],
        pinned=True,
    )
    store.create_prompt(owner_id="bob", name="Bob's prompt", content="Translate for bob", tags=["language"])
    return translator, reviewer


def _names(rows):
    return [prompt.name for prompt, _ in rows]


def test_search_is_scoped_to_owner(library, seeded):
    assert sorted(_names(library.search("alice"))) == ["Code reviewer", "Translator"]
    assert _names(library.search("bob")) == ["Bob's prompt"]


def test_search_matches_current_content_case_insensitively(library, seeded):
    assert _names(library.search("alice", query="FRENCH")) == ["Translator"]


def test_search_matches_notes_and_source(library, seeded):
    assert _names(library.search("alice", query="strict")) == ["Code reviewer"]
    assert _names(library.search("alice", query="github")) == ["Code reviewer"]


def test_search_follows_content_of_new_version(library, store, seeded):
    translator, _ = seeded
    decision = decide_edit(store.current(translator.prompt.id), "Rewrite in German", save_as_version=True)
    store.apply_edit(translator.prompt.id, decision)

    assert _names(library.search("alice", query="german")) == ["Translator"]
    assert _names(library.search("alice", query="french")) == []


def test_filters_combine(library, seeded):
    assert _names(library.search("alice", tags=["code", "unrelated"])) == ["Code reviewer"]
    assert _names(library.search("alice", sources=["Internal"])) == ["Translator"]
    assert _names(library.search("alice", pinned=True)) == ["Code reviewer"]
    assert _names(library.search("alice", pinned=False, tags=["code"])) == []


def test_sort_by_name(library, seeded):
    rows = library.search("alice", sort_by="name", sort_order="asc")
    assert _names(rows) == ["Code reviewer", "Translator"]
    rows = library.search("alice", sort_by="name", sort_order="desc")
    assert _names(rows) == ["Translator", "Code reviewer"]


def test_sort_by_updated_at(db, library, seeded):
    translator, _ = seeded
    prompt = db.get(Prompt, translator.prompt.id)
    prompt.updated_at = datetime.now(timezone.utc) + timedelta(hours=1)
    db.commit()

    assert _names(library.search("alice"))[0] == "Translator"
    assert _names(library.search("alice", sort_order="asc"))[-1] == "Translator"


def test_tags_and_sources_are_sorted_and_unique(library, store, seeded):
    store.create_prompt(owner_id="alice", name="Blank", content="x", source="", tags=["code", " "])

    assert library.all_tags("alice") == ["code", "language", "translate"]
    assert library.all_sources("alice") == ["GitHub", "Internal"]


def test_version_counts(library, store, seeded):
    translator, reviewer = seeded
    decision = decide_edit(store.current(translator.prompt.id), "v2", save_as_version=True)
    store.apply_edit(translator.prompt.id, decision)

    counts = library.version_counts("alice")
    assert counts[translator.prompt.id] == 2
    assert counts[reviewer.prompt.id] == 1


def test_stats(db, library, store, seeded):
    translator, _ = seeded
    decision = decide_edit(store.current(translator.prompt.id), "v2", save_as_version=True)
    store.apply_edit(translator.prompt.id, decision)

    stats = library.stats("alice")
    assert stats == {
        "totalPrompts": 2,
        "pinnedPrompts": 1,
        "totalVersions": 3,
        "recentActivity": 2,
    }


def test_stats_recent_activity_window(library, seeded):
    later = datetime.now(timezone.utc) + timedelta(days=30)
    assert library.stats("alice", recent_days=7, now=later)["recentActivity"] == 0


def test_search_page_pages_in_query_order(library, store, seeded):
    store.create_prompt(owner_id="alice", name="Assistant", content="Help", source="Internal")

    rows, total = library.search_page("alice", sort_by="name", sort_order="asc", page=1, limit=2)
    assert total == 3
    assert _names(rows) == ["Assistant", "Code reviewer"]

    rows, total = library.search_page("alice", sort_by="name", sort_order="asc", page=2, limit=2)
    assert total == 3
    assert _names(rows) == ["Translator"]


def test_search_page_counts_only_matches(library, store, seeded):
    store.create_prompt(owner_id="alice", name="French tutor", content="Teach", source="Internal")

    rows, total = library.search_page("alice", query="french", sources=["Internal"], limit=1)
    assert total == 2
    assert len(rows) == 1

    rows, total = library.search_page("alice", tags=["code"], page=1, limit=10)
    assert total == 1
    assert _names(rows) == ["Code reviewer"]


def test_search_treats_name_sort_case_insensitively(library, store):
    for name in ("beta", "Alpha", "gamma"):
        store.create_prompt(owner_id="carol", name=name, content="x")

    rows = library.search("carol", sort_by="name", sort_order="asc")
    assert _names(rows) == ["Alpha", "beta", "gamma"]
