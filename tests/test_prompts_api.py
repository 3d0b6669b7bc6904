import uuid

from sqlalchemy import select

from prompt_tools.core.security import create_access_token, create_token
from prompt_tools.models.audit_log import AuditLog


def _create(client, headers, **overrides):
    payload = {"name": "Summarizer", "content": "Summarize {text}", "tags": ["writing"], "source": "Blog"}
    payload.update(overrides)
    response = client.post("/api/v1/prompts", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_requests_without_token_are_rejected(client):
    assert client.get("/api/v1/prompts").status_code == 401
    assert client.get("/api/v1/prompts", headers={"Authorization": "Bearer nonsense"}).status_code == 401


def test_token_of_wrong_type_is_rejected(client):
    token = create_token("alice", None, token_type="refresh")
    response = client.get("/api/v1/prompts", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_create_prompt(client, alice):
    body = _create(client, alice)

    assert body["name"] == "Summarizer"
    assert body["currentVersion"]["version"] == "1.0.0"
    assert body["currentVersion"]["content"] == "Summarize {text}"
    assert body["currentVersion"]["parentVersionId"] is None
    assert body["currentVersionId"] == body["currentVersion"]["id"]
    assert body["versionCount"] == 1
    assert "writing" in body["categories"]
    assert "all" in body["categories"]


def test_create_validates_payload(client, alice):
    response = client.post("/api/v1/prompts", json={"name": "", "content": "x"}, headers=alice)
    assert response.status_code == 422
    response = client.post("/api/v1/prompts", json={"name": "n" * 101, "content": "x"}, headers=alice)
    assert response.status_code == 422
    response = client.post("/api/v1/prompts", json={"name": "No content"}, headers=alice)
    assert response.status_code == 422


def test_update_in_place_keeps_version(client, alice):
    created = _create(client, alice)

    response = client.put(
        f"/api/v1/prompts/{created['id']}",
        json={"name": "Summarizer v2", "content": "Summarize briefly", "tags": ["writing"]},
        headers=alice,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Summarizer v2"
    assert body["currentVersion"]["id"] == created["currentVersion"]["id"]
    assert body["currentVersion"]["version"] == "1.0.0"
    assert body["currentVersion"]["content"] == "Summarize briefly"
    assert body["versionCount"] == 1


def test_update_save_as_version(client, alice):
    created = _create(client, alice)

    response = client.put(
        f"/api/v1/prompts/{created['id']}",
        json={
            "name": "Summarizer",
            "content": "Summarize in bullets",
            "saveAsVersion": True,
            "versionType": "minor",
        },
        headers=alice,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["currentVersion"]["version"] == "1.1.0"
    assert body["currentVersion"]["parentVersionId"] == created["currentVersion"]["id"]
    assert body["versionCount"] == 2


def test_update_rejects_unknown_bump_kind(client, alice):
    created = _create(client, alice)
    response = client.put(
        f"/api/v1/prompts/{created['id']}",
        json={"name": "x", "content": "y", "saveAsVersion": True, "versionType": "huge"},
        headers=alice,
    )
    assert response.status_code == 422


def test_get_prompt_detail_lists_recent_versions(client, alice):
    created = _create(client, alice)
    for content in ("two", "three"):
        client.put(
            f"/api/v1/prompts/{created['id']}",
            json={"name": "Summarizer", "content": content, "saveAsVersion": True},
            headers=alice,
        )

    response = client.get(f"/api/v1/prompts/{created['id']}", headers=alice)

    assert response.status_code == 200
    body = response.json()
    assert body["currentVersion"]["content"] == "three"
    assert [v["version"] for v in body["versions"]] == ["1.0.2", "1.0.1", "1.0.0"]


def test_other_users_prompt_is_not_found(client, alice, bob):
    created = _create(client, alice)
    url = f"/api/v1/prompts/{created['id']}"

    assert client.get(url, headers=bob).status_code == 404
    assert client.put(url, json={"name": "x", "content": "y"}, headers=bob).status_code == 404
    assert client.delete(url, headers=bob).status_code == 404
    assert client.get(url, headers=alice).status_code == 200


def test_invalid_and_unknown_ids(client, alice):
    assert client.get("/api/v1/prompts/not-a-uuid", headers=alice).status_code == 400
    response = client.get(f"/api/v1/prompts/{uuid.uuid4()}", headers=alice)
    assert response.status_code == 404
    assert response.json()["detail"] == "Prompt not found"


def test_delete_prompt(client, alice):
    created = _create(client, alice)
    url = f"/api/v1/prompts/{created['id']}"

    response = client.delete(url, headers=alice)

    assert response.status_code == 200
    assert client.get(url, headers=alice).status_code == 404
    assert client.get(f"{url}/versions", headers=alice).status_code == 404


def test_toggle_pin(client, alice):
    created = _create(client, alice)
    url = f"/api/v1/prompts/{created['id']}/pin"

    assert client.post(url, headers=alice).json()["pinned"] is True
    assert client.post(url, headers=alice).json()["pinned"] is False


def test_toggle_pin_is_audited(client, alice, session_factory):
    created = _create(client, alice)
    client.post(f"/api/v1/prompts/{created['id']}/pin", headers=alice)

    with session_factory() as session:
        log = session.scalars(
            select(AuditLog).where(AuditLog.action_type == "UPDATE")
        ).one()

    assert str(log.resource_id) == created["id"]
    assert log.old_data == {"pinned": False}
    assert log.new_data == {"pinned": True}


def test_category_filter_paginates(client, alice):
    for name in ("Reviewer", "Debugger", "Refactorer"):
        _create(client, alice, name=name, tags=["code"])
    _create(client, alice, name="Poet", tags=["creative"])

    body = client.get(
        "/api/v1/prompts",
        params={"category": "programming", "sortBy": "name", "sortOrder": "asc", "limit": 2, "page": 2},
        headers=alice,
    ).json()

    assert [p["name"] for p in body["prompts"]] == ["Reviewer"]
    assert body["pagination"]["total"] == 3


def test_versions_and_rollback(client, alice):
    created = _create(client, alice, content="original")
    client.put(
        f"/api/v1/prompts/{created['id']}",
        json={"name": "Summarizer", "content": "rewritten", "saveAsVersion": True, "versionType": "major"},
        headers=alice,
    )

    versions = client.get(f"/api/v1/prompts/{created['id']}/versions", headers=alice).json()
    assert [v["version"] for v in versions] == ["2.0.0", "1.0.0"]

    response = client.post(
        f"/api/v1/prompts/{created['id']}/rollback",
        json={"versionId": versions[-1]["id"]},
        headers=alice,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["currentVersion"]["content"] == "original"
    assert body["currentVersion"]["version"] == "2.0.1"
    assert body["versionCount"] == 3


def test_rollback_to_unknown_version(client, alice):
    created = _create(client, alice)
    response = client.post(
        f"/api/v1/prompts/{created['id']}/rollback",
        json={"versionId": str(uuid.uuid4())},
        headers=alice,
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Version not found"


def test_list_search_and_pagination(client, alice, bob):
    _create(client, alice, name="Translator", content="Translate to French", tags=["translate"])
    _create(client, alice, name="Reviewer", content="Review code", tags=["code"])
    _create(client, alice, name="Poet", content="Write a poem", tags=["creative"])
    _create(client, bob, name="Bob's", content="Translate for bob")

    body = client.get("/api/v1/prompts", params={"search": "translate"}, headers=alice).json()
    assert [p["name"] for p in body["prompts"]] == ["Translator"]

    body = client.get("/api/v1/prompts", params={"category": "programming"}, headers=alice).json()
    assert [p["name"] for p in body["prompts"]] == ["Reviewer"]

    body = client.get(
        "/api/v1/prompts",
        params={"sortBy": "name", "sortOrder": "asc", "limit": 2, "page": 2},
        headers=alice,
    ).json()
    assert [p["name"] for p in body["prompts"]] == ["Translator"]
    assert body["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}


def test_library_endpoints(client, alice):
    created = _create(client, alice, tags=["code", "AI"], source="GitHub")
    _create(client, alice, name="Other", tags=["writing"], source="Blog")
    client.post(f"/api/v1/prompts/{created['id']}/pin", headers=alice)

    counts = client.get("/api/v1/categories", headers=alice).json()
    assert counts["all"] == 2
    assert counts["pinned"] == 1
    assert counts["programming"] == 1
    assert counts["tech"] == 1

    assert client.get("/api/v1/tags", headers=alice).json() == ["AI", "code", "writing"]
    assert client.get("/api/v1/sources", headers=alice).json() == ["Blog", "GitHub"]

    stats = client.get("/api/v1/stats", headers=alice).json()
    assert stats["totalPrompts"] == 2
    assert stats["pinnedPrompts"] == 1
    assert stats["totalVersions"] == 2


def test_export_then_import_into_other_account(client, alice, bob):
    created = _create(client, alice)
    client.put(
        f"/api/v1/prompts/{created['id']}",
        json={"name": "Summarizer", "content": "v2", "saveAsVersion": True},
        headers=alice,
    )

    response = client.get("/api/v1/export", headers=alice)
    assert response.status_code == 200
    assert "attachment" in response.headers["content-disposition"]
    document = response.json()

    response = client.post("/api/v1/import", json=document, headers=bob)
    assert response.status_code == 200
    result = response.json()
    assert result["imported"] == 1

    imported_id = result["promptIds"][0]
    assert imported_id != created["id"]
    versions = client.get(f"/api/v1/prompts/{imported_id}/versions", headers=bob).json()
    assert [v["version"] for v in versions] == ["1.0.1", "1.0.0"]


def test_import_rejects_malformed_document(client, alice):
    response = client.post("/api/v1/import", json={"prompts": [{"name": "x", "versions": []}]}, headers=alice)
    assert response.status_code == 400


def test_mutations_are_audited(client, alice, session_factory):
    created = _create(client, alice)
    client.put(
        f"/api/v1/prompts/{created['id']}",
        json={"name": "Summarizer", "content": "new", "saveAsVersion": True},
        headers=alice,
    )
    client.delete(f"/api/v1/prompts/{created['id']}", headers=alice)

    with session_factory() as session:
        logs = session.scalars(select(AuditLog)).all()

    by_action = {log.action_type: log for log in logs}
    assert sorted(by_action) == ["CREATE", "DELETE", "UPDATE"]
    assert all(log.user_id == "alice" for log in logs)
    update = by_action["UPDATE"]
    assert update.old_data["version"] == "1.0.0"
    assert update.new_data["version"] == "1.0.1"


def test_token_helper_uses_subject_as_owner(client):
    headers = {"Authorization": f"Bearer {create_access_token('carol')}"}
    _create(client, headers)
    assert client.get("/api/v1/prompts", headers=headers).json()["pagination"]["total"] == 1
