import pytest
from httpx import ASGITransport, AsyncClient

from pipeline_app.main import create_application
from pipeline_app.services.auth_service import (
    DEFAULT_CREDENTIALS,
    Credential,
    InvalidCredentialsError,
    MissingCredentialsError,
    authenticate,
    decode_session_token,
    is_blank,
)


@pytest.mark.parametrize(
    ("username", "password", "role"),
    [("admin", "admin", "admin"), ("test", "test", "user")],
)
async def test_login_with_known_credentials_succeeds(api_client, username: str, password: str, role: str) -> None:
    resp = await api_client.post("/api/login", json={"username": username, "password": password})
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["success"] is True
    assert payload["message"] == "Login successful"
    assert payload["token"]
    assert payload["user"] == {"username": username, "role": role}


async def test_admin_login_reports_admin_role(api_client) -> None:
    resp = await api_client.post("/api/login", json={"username": "admin", "password": "admin"})
    assert resp.status_code == 200
    assert resp.json()["user"]["role"] == "admin"


async def test_login_token_carries_user_and_role(api_client) -> None:
    resp = await api_client.post("/api/login", json={"username": "test", "password": "test"})
    claims = decode_session_token(resp.json()["token"])
    assert claims["sub"] == "test"
    assert claims["role"] == "user"
    assert claims["exp"] > claims["iat"]


@pytest.mark.parametrize(
    ("username", "password"),
    [
        ("wrong", "wrong"),
        ("admin", "test"),
        ("test", "admin"),
        ("Admin", "admin"),
        ("admin", "admin "),
        ("user1", "user1"),
        ("invalid", "invalid"),
    ],
)
async def test_login_with_other_credentials_is_rejected(api_client, username: str, password: str) -> None:
    resp = await api_client.post("/api/login", json={"username": username, "password": password})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Invalid credentials"}


@pytest.mark.parametrize(
    "body",
    [
        {"username": "admin"},
        {"password": "admin"},
        {"username": "", "password": "admin"},
        {"username": "admin", "password": ""},
        {"username": None, "password": None},
        {"username": "nobody"},
    ],
)
async def test_login_missing_fields_is_bad_request(api_client, body: dict) -> None:
    resp = await api_client.post("/api/login", json=body)
    assert resp.status_code == 400
    assert resp.json()["success"] is False


async def test_login_with_empty_object(api_client) -> None:
    resp = await api_client.post("/api/login", json={})
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Username and password required"}


async def test_login_without_body_behaves_like_empty_object(api_client) -> None:
    resp = await api_client.post("/api/login")
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Username and password required"}


async def test_login_with_malformed_json_is_bad_request(api_client) -> None:
    resp = await api_client.post(
        "/api/login",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Bad Request"


@pytest.mark.parametrize(
    "body",
    [
        {"username": 123, "password": "x"},
        {"username": "admin", "password": 1},
        {"username": True, "password": True},
        {"username": ["admin"], "password": {"x": 1}},
        {"username": [], "password": {}},
    ],
)
async def test_login_with_non_string_values_is_rejected(api_client, body: dict) -> None:
    resp = await api_client.post("/api/login", json=body)
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Invalid credentials"}


@pytest.mark.parametrize(
    "body",
    [
        {"username": 0, "password": "admin"},
        {"username": "admin", "password": False},
        {"username": "admin", "password": 0.0},
    ],
)
async def test_login_with_falsy_values_counts_as_missing(api_client, body: dict) -> None:
    resp = await api_client.post("/api/login", json=body)
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Username and password required"}


@pytest.mark.parametrize("body", [[], ["admin", "admin"], "admin", 42])
async def test_login_with_non_object_json_counts_as_empty(api_client, body) -> None:
    resp = await api_client.post("/api/login", json=body)
    assert resp.status_code == 400
    assert resp.json()["success"] is False


async def test_login_accepts_urlencoded_form(api_client) -> None:
    resp = await api_client.post("/api/login", data={"username": "admin", "password": "admin"})
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert resp.json()["user"] == {"username": "admin", "role": "admin"}


async def test_login_form_with_bad_or_missing_fields(api_client) -> None:
    rejected = await api_client.post("/api/login", data={"username": "admin", "password": "nope"})
    missing = await api_client.post("/api/login", data={"username": "admin"})

    assert rejected.status_code == 401
    assert rejected.json()["success"] is False
    assert missing.status_code == 400
    assert missing.json() == {"success": False, "message": "Username and password required"}


async def test_login_ignores_unsupported_body_types(api_client) -> None:
    resp = await api_client.post(
        "/api/login",
        content=b"username=admin&password=admin",
        headers={"Content-Type": "text/plain"},
    )
    assert resp.status_code == 400
    assert resp.json()["success"] is False


async def test_login_uses_injected_credential_table(settings, http_metrics) -> None:
    application = create_application(
        settings=settings,
        metrics=http_metrics,
        credentials={"alice": Credential(password="wonderland", role="user")},
    )
    async with AsyncClient(transport=ASGITransport(app=application), base_url="http://test") as client:
        accepted = await client.post("/api/login", json={"username": "alice", "password": "wonderland"})
        rejected = await client.post("/api/login", json={"username": "admin", "password": "admin"})

    assert accepted.status_code == 200
    assert accepted.json()["user"] == {"username": "alice", "role": "user"}
    assert rejected.status_code == 401


def test_authenticate_checks_missing_fields_before_lookup() -> None:
    with pytest.raises(MissingCredentialsError):
        authenticate({}, "", "")
    with pytest.raises(MissingCredentialsError):
        authenticate(DEFAULT_CREDENTIALS, "admin", None)


def test_authenticate_does_not_distinguish_unknown_user_from_bad_password() -> None:
    with pytest.raises(InvalidCredentialsError) as unknown_user:
        authenticate(DEFAULT_CREDENTIALS, "ghost", "admin")
    with pytest.raises(InvalidCredentialsError) as bad_password:
        authenticate(DEFAULT_CREDENTIALS, "admin", "nope")
    assert str(unknown_user.value) == str(bad_password.value)


def test_authenticate_returns_matching_credential() -> None:
    assert authenticate(DEFAULT_CREDENTIALS, "test", "test").role == "user"


@pytest.mark.parametrize("value", [None, False, 0, 0.0, float("nan"), ""])
def test_is_blank_for_falsy_values(value) -> None:
    assert is_blank(value)


@pytest.mark.parametrize("value", [True, 1, -1.5, "0", " ", [], {}, ["admin"]])
def test_is_blank_keeps_truthy_values(value) -> None:
    assert not is_blank(value)


def test_authenticate_rejects_non_string_values_as_invalid() -> None:
    with pytest.raises(InvalidCredentialsError):
        authenticate(DEFAULT_CREDENTIALS, 123, "x")
    with pytest.raises(InvalidCredentialsError):
        authenticate(DEFAULT_CREDENTIALS, "admin", ["admin"])
