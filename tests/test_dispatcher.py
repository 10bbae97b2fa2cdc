import asyncio
import inspect
import threading

from careerspage.services import dispatcher
from careerspage.services.dispatcher import PUBLIC, StepRoute, normalize_step

from conftest import send


def test_health_and_root(client):
    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"
    assert "timestamp" in health.json()

    assert client.get("/").json()["status"] == "running"


def test_unknown_step_is_a_validation_error(client):
    response = send(client, "DO_SOMETHING")

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == 400
    assert "DO_SOMETHING" in body["error"]["message"]


def test_step_names_are_normalized():
    assert normalize_step("  get_company ") == "GET_COMPANY"
    assert normalize_step("login") == "LOGIN"
    assert normalize_step("login", legacy=True) == "AUTH_LOGIN"


def test_protected_step_without_token_never_reaches_handler(client):
    response = send(client, "CREATE_COMPANY", {"name": "Acme", "slug": "acme"})

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "No authorization token provided"
    assert send(client, "GET_COMPANY", {"slug": "acme"}).status_code == 404


def test_invalid_token_is_rejected(client):
    response = send(client, "GET_USER_COMPANIES", token="not-a-jwt")
    assert response.status_code == 401


def test_optional_step_rejects_bad_token(client, company):
    assert send(client, "GET_JOBS", {"companySlug": "acme"}).status_code == 200
    assert send(client, "GET_JOBS", {"companySlug": "acme"}, token="garbage").status_code == 401


def test_spoofed_current_user_is_ignored(client, owner):
    token, user = owner
    response = send(client, "CREATE_COMPANY", {
        "name": "Acme",
        "slug": "acme",
        "currentUser": {"id": "someone-else", "email": "evil@example.com"},
    }, token)

    assert response.json()["data"]["created_by"] == user["id"]


def test_missing_step_in_body_uses_error_envelope(client):
    response = client.post("/api/event", json={"payload": {}})

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert response.json()["error"]["details"]


def test_legacy_endpoint_resolves_aliases_and_payload_token(client, owner, company):
    token, _ = owner

    login = send(client, "LOGIN", {"email": "owner@example.com", "password": "password123"}, legacy=True)
    assert login.status_code == 200

    companies = send(client, "GET_COMPANIES", {"token": token}, legacy=True)
    assert companies.status_code == 200
    assert [c["slug"] for c in companies.json()["data"]["companies"]] == ["acme"]

    # Aliases are not part of the current protocol
    assert send(client, "LOGIN", {"email": "owner@example.com", "password": "password123"}).status_code == 400


def test_unexpected_handler_error_becomes_internal_error(client, monkeypatch):
    async def broken(payload, ctx):
        raise RuntimeError("kaboom")

    monkeypatch.setitem(dispatcher.STEPS, "TEST_CONNECTION", StepRoute(broken, PUBLIC))
    response = send(client, "TEST_CONNECTION")

    assert response.status_code == 500
    assert response.json()["error"]["message"] == "Internal server error"
    assert response.json()["error"]["details"] == "kaboom"


def test_plain_handlers_run_off_the_event_loop(client, monkeypatch):
    threads = {}

    def blocking(payload, ctx):
        threads["plain"] = threading.get_ident()
        return {"success": True}

    async def coroutine(payload, ctx):
        threads["coroutine"] = threading.get_ident()
        return {"success": True}

    monkeypatch.setitem(dispatcher.STEPS, "TEST_CONNECTION", StepRoute(blocking, PUBLIC))
    monkeypatch.setitem(dispatcher.STEPS, "TEST_STORAGE", StepRoute(coroutine, PUBLIC))

    assert send(client, "TEST_CONNECTION").status_code == 200
    assert send(client, "TEST_STORAGE").status_code == 200
    assert threads["plain"] != threads["coroutine"]


def test_database_handlers_are_plain_functions():
    for step in ["AUTH_REGISTER", "AUTH_LOGIN", "CREATE_COMPANY", "UPDATE_JOB"]:
        assert not inspect.iscoroutinefunction(dispatcher.STEPS[step].handler), step


def test_slow_handler_times_out(client, app, monkeypatch):
    async def slow(payload, ctx):
        await asyncio.sleep(1)

    monkeypatch.setitem(dispatcher.STEPS, "TEST_CONNECTION", StepRoute(slow, PUBLIC))
    app.state.settings.REQUEST_TIMEOUT_SECONDS = 0.05
    response = send(client, "TEST_CONNECTION")

    assert response.status_code == 504
    assert response.json()["error"]["code"] == 504


def test_connection_and_storage_diagnostics(client):
    connection = send(client, "TEST_CONNECTION")
    assert connection.status_code == 200
    assert connection.json()["data"]["tableExists"] is True

    storage = send(client, "TEST_STORAGE")
    assert storage.status_code == 200
    data = storage.json()["data"]
    assert data["bucket"] == {"name": "career_company", "public": True}
    assert "/storage/v1/object/public/career_company/test/" in data["testUrl"]

    # The test object is not left behind
    assert client.get(data["testUrl"].replace("http://localhost:8000", "")).status_code == 404
