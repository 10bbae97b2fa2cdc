from datetime import datetime

from conftest import send


def test_create_company_fills_defaults(client, owner):
    token, user = owner
    response = send(client, "CREATE_COMPANY", {"name": "Acme", "slug": "acme"}, token)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["created_by"] == user["id"]
    assert data["published"] is False
    assert data["branding"]["primaryColor"] == "#3b82f6"
    assert [s["type"] for s in data["sections"]] == ["hero", "about", "jobs"]
    assert data["sections"][0]["title"] == "Welcome to Acme"
    assert data["createdAt"] and data["updatedAt"]


def test_create_company_defaults_name(client, owner):
    token, _ = owner
    data = send(client, "CREATE_COMPANY", {"slug": "nameless"}, token).json()["data"]
    assert data["name"] == "My Company"


def test_create_company_rejects_bad_slug(client, owner):
    token, _ = owner
    for slug in ["Bad Slug", "UPPER", "under_score", ""]:
        response = send(client, "CREATE_COMPANY", {"name": "Acme", "slug": slug}, token)
        assert response.status_code == 400, slug


def test_duplicate_slug_writes_nothing(client, owner, register, company):
    other_token, _ = register("other@example.com")
    response = send(client, "CREATE_COMPANY", {"name": "Copycat", "slug": "acme"}, other_token)

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Company with this slug already exists"
    assert send(client, "GET_USER_COMPANIES", token=other_token).json()["data"]["companies"] == []
    assert send(client, "GET_COMPANY", {"slug": "acme"}).json()["data"]["name"] == "Acme"


def test_get_company_is_public(client, company):
    response = send(client, "GET_COMPANY", {"slug": "acme"})
    assert response.status_code == 200
    assert response.json()["data"]["id"] == company["id"]

    assert send(client, "GET_COMPANY", {"slug": "nope"}).status_code == 404
    assert send(client, "GET_COMPANY", {}).status_code == 400


def test_get_company_can_embed_active_jobs(client, owner, company):
    token, _ = owner
    send(client, "ADD_JOB", {"companySlug": "acme", "title": "Engineer"}, token)
    send(client, "ADD_JOB", {"companySlug": "acme", "title": "Closed", "isActive": False}, token)

    data = send(client, "GET_COMPANY", {"slug": "acme", "includeJobs": True}).json()["data"]
    assert [job["title"] for job in data["jobs"]] == ["Engineer"]


def test_partial_update_keeps_untouched_fields(client, owner, company):
    token, _ = owner
    response = send(client, "UPDATE_COMPANY", {
        "slug": "acme",
        "branding": {"primaryColor": "#000000"},
    }, token)

    data = response.json()["data"]
    assert response.status_code == 200
    assert data["name"] == "Acme"
    assert data["branding"] == {"primaryColor": "#000000"}
    assert data["sections"] == company["sections"]


def test_update_normalizes_section_map(client, owner, company):
    token, _ = owner
    sections = {
        "jobs": {"title": "Open Roles", "order": 2},
        "hero": {"title": "Hello", "order": 1},
    }
    data = send(client, "UPDATE_COMPANY", {"slug": "acme", "sections": sections}, token).json()["data"]

    assert [(s["id"], s["type"], s["order"]) for s in data["sections"]] == [("hero", "hero", 1), ("jobs", "jobs", 2)]


def test_sections_must_be_objects(client, owner, company):
    token, _ = owner
    for sections in [[1, 2], ["hero"], {"hero": 5}, {"hero": "text"}]:
        response = send(client, "UPDATE_COMPANY", {"slug": "acme", "sections": sections}, token)
        assert response.status_code == 400, sections

    response = send(client, "CREATE_COMPANY", {"name": "Beta", "slug": "beta", "sections": [None]}, token)
    assert response.status_code == 400
    assert send(client, "GET_COMPANY", {"slug": "acme"}).json()["data"]["sections"] == company["sections"]


def test_publishing_stamps_published_at(client, owner, company):
    token, _ = owner
    assert company["publishedAt"] is None

    data = send(client, "UPDATE_COMPANY", {"slug": "acme", "published": True}, token).json()["data"]
    assert data["published"] is True
    assert data["publishedAt"] is not None


def test_update_requires_ownership(client, register, company):
    other_token, _ = register("intruder@example.com")
    response = send(client, "UPDATE_COMPANY", {"slug": "acme", "name": "Hijacked"}, other_token)

    assert response.status_code == 403
    assert send(client, "GET_COMPANY", {"slug": "acme"}).json()["data"]["name"] == "Acme"


def test_update_unknown_company(client, owner):
    token, _ = owner
    assert send(client, "UPDATE_COMPANY", {"slug": "ghost", "name": "X"}, token).status_code == 404


def test_user_companies_only_lists_own(client, owner, register, company):
    token, _ = owner
    other_token, _ = register("other@example.com")
    send(client, "CREATE_COMPANY", {"name": "Other", "slug": "other-co"}, other_token)
    send(client, "CREATE_COMPANY", {"name": "Second", "slug": "acme-two"}, token)

    slugs = [c["slug"] for c in send(client, "GET_USER_COMPANIES", token=token).json()["data"]["companies"]]
    assert sorted(slugs) == ["acme", "acme-two"]


def test_delete_company_requires_owner_and_removes_jobs(client, owner, register, company):
    token, _ = owner
    send(client, "ADD_JOB", {"companySlug": "acme", "title": "Engineer"}, token)
    other_token, _ = register("other@example.com")

    assert send(client, "DELETE_COMPANY", {"id": company["id"]}, other_token).status_code == 403

    response = send(client, "DELETE_COMPANY", {"id": company["id"]}, token)
    assert response.status_code == 200
    assert send(client, "GET_COMPANY", {"slug": "acme"}).status_code == 404
    assert send(client, "GET_JOBS", {"companyId": company["id"]}).status_code == 404


def test_demo_company_is_idempotent(client):
    first = send(client, "CREATE_DEMO_COMPANY").json()
    second = send(client, "CREATE_DEMO_COMPANY").json()

    assert first["data"]["slug"] == "demo"
    assert first["data"]["created_by"] is None
    assert second["data"]["id"] == first["data"]["id"]
    assert second["message"] == "Demo company already exists"


def test_update_bumps_updated_at(client, owner, company):
    token, _ = owner
    data = send(client, "UPDATE_COMPANY", {"slug": "acme", "name": "Acme Inc"}, token).json()["data"]

    assert datetime.fromisoformat(data["updatedAt"]) > datetime.fromisoformat(company["updatedAt"])
