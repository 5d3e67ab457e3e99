import pytest
import requests
from requests.auth import _basic_auth_str

from unity_client import ConnectConfig, UnityClient
from unity_client.exceptions import (
    AuthenticationError,
    ClientError,
    ServerError,
    UnexpectedResponseError,
)
from unity_client.retry import Outcome, RetryExecutor, classify

BASE_URL = "https://unity.example"
LOGIN_URL = f"{BASE_URL}/api/types/loginSessionInfo/instances"
SNAP_URL = f"{BASE_URL}/api/instances/snap/snap1"

EXPIRED = {"status_code": 401, "json": {"error": {"httpStatusCode": 401, "messages": [{"en-US": "expired"}]}}}
SNAPSHOT = {"json": {"content": {"id": "snap1", "name": "daily"}}}


def build_client() -> UnityClient:
    return UnityClient(BASE_URL)


def build_authenticated_client(requests_mock, token: str = "first") -> UnityClient:
    client = build_client()
    requests_mock.get(LOGIN_URL, headers={"EMC-CSRF-TOKEN": token})
    client.authenticate(ConnectConfig(username="admin", password="secret"))
    return client


def test_success_does_not_login(requests_mock):
    client = build_authenticated_client(requests_mock)
    login = requests_mock.get(LOGIN_URL, headers={"EMC-CSRF-TOKEN": "second"})
    operation = requests_mock.get(SNAP_URL, **SNAPSHOT)

    result = client.execute_with_retry_authenticate("GET", "/api/instances/snap/snap1")

    assert result["content"]["id"] == "snap1"
    assert operation.call_count == 1
    assert login.call_count == 0


def test_expired_session_is_refreshed_and_retried_once(requests_mock):
    client = build_authenticated_client(requests_mock)
    login = requests_mock.get(LOGIN_URL, headers={"EMC-CSRF-TOKEN": "second"})
    operation = requests_mock.get(SNAP_URL, [EXPIRED, SNAPSHOT])

    snapshot = client.snapshots.find_by_id("snap1")

    assert snapshot.name == "daily"
    assert operation.call_count == 2
    assert login.call_count == 1
    assert operation.request_history[0].headers["EMC-CSRF-TOKEN"] == "first"
    assert operation.request_history[1].headers["EMC-CSRF-TOKEN"] == "second"
    assert client.get_token() == "second"


def test_second_expiry_is_terminal(requests_mock):
    client = build_authenticated_client(requests_mock)
    login = requests_mock.get(LOGIN_URL, headers={"EMC-CSRF-TOKEN": "second"})
    operation = requests_mock.get(SNAP_URL, [EXPIRED, EXPIRED, SNAPSHOT])

    with pytest.raises(AuthenticationError) as excinfo:
        client.snapshots.find_by_id("snap1")

    assert excinfo.value.status_code == 401
    assert operation.call_count == 2
    assert login.call_count == 1


def test_failed_reauthentication_is_terminal(requests_mock):
    client = build_authenticated_client(requests_mock)
    login = requests_mock.get(LOGIN_URL, status_code=401, json={"error": {"messages": [{"en-US": "bad password"}]}})
    operation = requests_mock.get(SNAP_URL, [EXPIRED, SNAPSHOT])

    with pytest.raises(AuthenticationError) as excinfo:
        client.snapshots.find_by_id("snap1")

    assert "bad password" in str(excinfo.value)
    assert operation.call_count == 1
    assert login.call_count == 1
    assert client.get_token() == "first"


def test_reauthentication_uses_stored_credentials(requests_mock):
    client = build_authenticated_client(requests_mock)
    login = requests_mock.get(LOGIN_URL, headers={"EMC-CSRF-TOKEN": "second"})
    requests_mock.get(SNAP_URL, [EXPIRED, SNAPSHOT])

    client.snapshots.find_by_id("snap1")

    expected = _basic_auth_str("admin", "secret")
    assert login.last_request.headers["Authorization"] == expected


def test_reauthentication_without_prior_login_uses_empty_credentials(requests_mock):
    client = build_client()
    login = requests_mock.get(LOGIN_URL, status_code=401)
    requests_mock.get(SNAP_URL, [EXPIRED, SNAPSHOT])

    with pytest.raises(AuthenticationError):
        client.snapshots.find_by_id("snap1")

    assert login.call_count == 1


@pytest.mark.parametrize(
    ("status_code", "error_cls"),
    [(400, ClientError), (404, ClientError), (409, ClientError), (500, ServerError), (503, ServerError)],
)
def test_other_errors_are_not_retried(requests_mock, status_code, error_cls):
    client = build_authenticated_client(requests_mock)
    login = requests_mock.get(LOGIN_URL, headers={"EMC-CSRF-TOKEN": "second"})
    operation = requests_mock.get(SNAP_URL, status_code=status_code, text="failure body")

    with pytest.raises(error_cls) as excinfo:
        client.execute_with_retry_authenticate("GET", "/api/instances/snap/snap1")

    assert excinfo.value.status_code == status_code
    assert excinfo.value.details == "failure body"
    assert operation.call_count == 1
    assert login.call_count == 0


def test_timeout_is_a_server_error_without_retry(requests_mock):
    client = build_authenticated_client(requests_mock)
    login = requests_mock.get(LOGIN_URL, headers={"EMC-CSRF-TOKEN": "second"})
    operation = requests_mock.get(SNAP_URL, exc=requests.exceptions.ReadTimeout)

    with pytest.raises(ServerError):
        client.execute_with_retry_authenticate("GET", "/api/instances/snap/snap1")

    assert operation.call_count == 1
    assert login.call_count == 0


def test_array_error_code_is_preserved(requests_mock):
    client = build_authenticated_client(requests_mock)
    requests_mock.post(
        f"{BASE_URL}/api/instances/snap/snap1/action/modify",
        status_code=422,
        json={
            "error": {
                "errorCode": 100666418,
                "httpStatusCode": 422,
                "messages": [{"en-US": "The snapshot is being used."}],
            }
        },
    )

    with pytest.raises(ClientError) as excinfo:
        client.snapshots.modify("snap1", "new description")

    assert excinfo.value.error_code == 100666418
    assert "The snapshot is being used." in str(excinfo.value)
    assert "100666418" in excinfo.value.details


def test_classify_maps_errors():
    assert classify(None) is Outcome.SUCCESS
    assert classify(AuthenticationError("x", status_code=401)) is Outcome.AUTH_EXPIRED
    assert classify(ClientError("x", status_code=404)) is Outcome.CLIENT_ERROR
    assert classify(ServerError("x", status_code=500)) is Outcome.SERVER_ERROR
    assert classify(ServerError("x")) is Outcome.SERVER_ERROR


class _Recorder:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.tokens = []

    def __call__(self, token):
        self.tokens.append(token)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def test_executor_bounds_retries_to_one():
    token = {"value": "t0"}
    logins = []

    def reauthenticate(stale):
        logins.append(stale)
        token["value"] = f"t{len(logins)}"

    executor = RetryExecutor(get_token=lambda: token["value"], reauthenticate=reauthenticate)
    operation = _Recorder([AuthenticationError("a"), AuthenticationError("b"), "never"])

    with pytest.raises(AuthenticationError, match="b"):
        executor.execute(operation)

    assert operation.tokens == ["t0", "t1"]
    assert logins == ["t0"]


def test_executor_passes_non_request_errors_through():
    executor = RetryExecutor(get_token=lambda: None, reauthenticate=lambda stale: None)
    operation = _Recorder([UnexpectedResponseError("bad json")])

    with pytest.raises(UnexpectedResponseError):
        executor.execute(operation)

    assert operation.tokens == [None]
