import pytest
import requests

from frontend.api_client import ApiClient, ApiClientError
from frontend.session import Session, SessionStore

BASE = "http://api.test/api"
USER = {"id": 1, "username": "alice", "email": "alice@example.com"}


def make_response(mocker, status=200, body=None):
    response = mocker.Mock(spec=requests.Response)
    response.status_code = status
    response.ok = status < 400
    if body is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def http(mocker):
    return mocker.Mock(spec=requests.Session)


@pytest.fixture
def store(tmp_path):
    return SessionStore(tmp_path / "session.json")


def test_login_signs_in_and_persists(mocker, http, store):
    http.request.return_value = make_response(mocker, body={"token": "tok", "user": USER})
    client = ApiClient(Session(), store=store, base_url=BASE, http=http)

    user = client.login("alice@example.com", "secret1")

    assert user == USER
    assert client.session.token == "tok"
    assert store.load().token == "tok"
    http.request.assert_called_once_with(
        "POST", f"{BASE}/auth/login", headers={}, timeout=10.0,
        json={"email": "alice@example.com", "password": "secret1"},
    )


def test_register_sends_optional_names(mocker, http):
    http.request.return_value = make_response(mocker, 201, {"token": "tok", "user": USER})
    client = ApiClient(Session(), base_url=BASE, http=http)

    client.register("alice", "alice@example.com", "secret1", first_name="Alice")

    payload = http.request.call_args.kwargs["json"]
    assert payload == {"username": "alice", "email": "alice@example.com", "password": "secret1", "firstName": "Alice"}


def test_requests_carry_bearer_token(mocker, http):
    http.request.return_value = make_response(mocker, body={"message": "Successfully joined the event"})
    client = ApiClient(Session(token="tok"), base_url=BASE, http=http)

    assert client.join_event(7) == "Successfully joined the event"
    args, kwargs = http.request.call_args
    assert args == ("POST", f"{BASE}/events/7/join")
    assert kwargs["headers"] == {"Authorization": "Bearer tok"}


def test_error_response_raises(mocker, http):
    http.request.return_value = make_response(
        mocker, 400, {"error": "Email already registered", "code": "Conflict", "field": "email"}
    )
    client = ApiClient(Session(), base_url=BASE, http=http)

    with pytest.raises(ApiClientError) as exc:
        client.register("alice", "alice@example.com", "secret1")

    assert exc.value.status_code == 400
    assert exc.value.code == "Conflict"
    assert exc.value.field == "email"
    assert not client.session.is_authenticated


def test_error_without_json_body(mocker, http):
    http.request.return_value = make_response(mocker, 502)
    client = ApiClient(Session(), base_url=BASE, http=http)

    with pytest.raises(ApiClientError) as exc:
        client.list_events()
    assert exc.value.message == "Request failed with status 502"


def test_list_events_params(mocker, http):
    body = {"events": [], "pagination": {"current": 2, "pages": 3, "total": 3}}
    http.request.return_value = make_response(mocker, body=body)
    client = ApiClient(Session(), base_url=BASE, http=http)

    assert client.list_events(category="education", page=2, limit=1) == body
    assert http.request.call_args.kwargs["params"] == {"page": 2, "limit": 1, "category": "education"}


def test_update_profile_refreshes_cached_user(mocker, http):
    http.request.return_value = make_response(mocker, body={"user": dict(USER, bio="Hi")})
    client = ApiClient(Session(token="tok", user=dict(USER)), base_url=BASE, http=http)

    client.update_profile({"bio": "Hi"})

    assert client.session.user["bio"] == "Hi"


def test_from_store_restores_user(mocker, http, store):
    store.save(Session(token="tok"))
    http.request.return_value = make_response(mocker, body={"user": USER})

    client = ApiClient.from_store(store, base_url=BASE, http=http)

    assert client.session.user == USER
    args, kwargs = http.request.call_args
    assert args == ("GET", f"{BASE}/auth/me")
    assert kwargs["headers"] == {"Authorization": "Bearer tok"}


def test_restore_drops_rejected_token(mocker, http, store):
    store.save(Session(token="expired"))
    http.request.return_value = make_response(mocker, 401, {"error": "Token is not valid", "code": "Unauthenticated"})

    client = ApiClient.from_store(store, base_url=BASE, http=http)

    assert not client.session.is_authenticated
    assert not store.path.exists()


def test_restore_keeps_token_on_server_error(mocker, http, store):
    store.save(Session(token="tok"))
    http.request.return_value = make_response(mocker, 500, {"error": "Internal Server Error"})

    with pytest.raises(ApiClientError):
        ApiClient.from_store(store, base_url=BASE, http=http)
    assert store.load().token == "tok"


def test_restore_without_token_makes_no_request(http, store):
    client = ApiClient.from_store(store, base_url=BASE, http=http)
    assert client.session.user is None
    http.request.assert_not_called()


def test_logout_clears_store(mocker, http, store):
    http.request.return_value = make_response(mocker, body={"token": "tok", "user": USER})
    client = ApiClient(Session(), store=store, base_url=BASE, http=http)
    client.login("alice@example.com", "secret1")

    client.logout()

    assert client.session == Session()
    assert not store.path.exists()


def test_base_url_from_environment(monkeypatch, http):
    monkeypatch.setenv("SOCIAL_SERVE_API_URL", "http://env.test/api/")
    assert ApiClient(Session(), http=http).base_url == "http://env.test/api"
