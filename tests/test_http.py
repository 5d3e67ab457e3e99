import json

import pytest
import requests

from unity_client.config import ClientConfig
from unity_client.exceptions import (
    AuthenticationError,
    ClientError,
    ServerError,
    UnexpectedResponseError,
)
from unity_client.http import Transport

BASE_URL = "https://unity.example"


def build_transport() -> Transport:
    return Transport(ClientConfig(base_url=BASE_URL))


def make_response(status_code, body=None, text=None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    if body is not None:
        text = json.dumps(body)
    response._content = (text or "").encode("utf-8")
    response.encoding = "utf-8"
    return response


@pytest.mark.parametrize(
    ("status_code", "error_cls"),
    [
        (401, AuthenticationError),
        (400, ClientError),
        (403, ClientError),
        (404, ClientError),
        (422, ClientError),
        (500, ServerError),
        (502, ServerError),
        (503, ServerError),
    ],
)
def test_parse_json_error_classifies_status(status_code, error_cls):
    error = build_transport().parse_json_error(make_response(status_code, text="oops"))

    assert type(error) is error_cls
    assert error.status_code == status_code
    assert error.details == "oops"


def test_parse_json_error_extracts_messages():
    body = {
        "error": {
            "errorCode": 131149829,
            "httpStatusCode": 404,
            "messages": [{"en-US": "The requested resource does not exist."}],
        }
    }

    error = build_transport().parse_json_error(make_response(404, body))

    assert str(error) == "Unity API error 404: The requested resource does not exist."
    assert error.error_code == 131149829


def test_parse_json_error_without_body():
    response = make_response(503)
    response.reason = "Service Unavailable"

    error = build_transport().parse_json_error(response)

    assert str(error) == "Unity API error 503: Service Unavailable"
    assert error.error_code is None


def test_do_with_headers_merges_default_headers(requests_mock):
    matcher = requests_mock.post(f"{BASE_URL}/api/types/snap/instances", json={"content": {"id": "x"}})

    response = build_transport().post(
        "/api/types/snap/instances", {"EMC-CSRF-TOKEN": "abc"}, {"name": "n"}
    )

    assert response.data == {"content": {"id": "x"}}
    headers = matcher.last_request.headers
    assert headers["EMC-CSRF-TOKEN"] == "abc"
    assert headers["X-EMC-REST-CLIENT"] == "true"
    assert headers["Accept"] == "application/json"
    assert matcher.last_request.json() == {"name": "n"}


def test_empty_success_body_has_no_data(requests_mock):
    requests_mock.delete(f"{BASE_URL}/api/instances/snap/snap1", status_code=204)

    response = build_transport().delete("/api/instances/snap/snap1")

    assert response.status_code == 204
    assert response.data is None


def test_invalid_json_success_body(requests_mock):
    requests_mock.get(f"{BASE_URL}/api/types/lun/instances", text="<html>")

    with pytest.raises(UnexpectedResponseError) as excinfo:
        build_transport().get("/api/types/lun/instances")

    assert excinfo.value.details == "<html>"


def test_resolve_url_keeps_absolute_urls():
    transport = build_transport()

    assert transport.resolve_url("/api/types/lun/instances") == f"{BASE_URL}/api/types/lun/instances"
    assert transport.resolve_url("https://other.example/x") == "https://other.example/x"
