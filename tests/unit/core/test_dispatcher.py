"""Unit tests for the event dispatcher."""

import json

import httpx
import pytest

from dpcheck.core.dispatcher import EventDispatcher, basic_auth_header
from dpcheck.core.exceptions import (
    ApiException,
    NetworkException,
    ValidationException,
    ValueNotSetException,
)


class Recorder:
    """httpx.MockTransport handler that records requests."""

    def __init__(self, status_code=200, body=None, error=None):
        self.status_code = status_code
        self.body = body if body is not None else {"ok": True}
        self.error = error
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.body)


@pytest.fixture
def identify_payload(payload_file):
    return payload_file('{"userId":"u1","event":"test"}')


@pytest.fixture
def ready_context(context):
    context.set_write_key("wk_abc123")
    context.set_data_plane_url("https://dp.example.com")
    return context


def make_dispatcher(context, handler):
    return EventDispatcher(context, transport=httpx.MockTransport(handler))


def test_basic_auth_header():
    assert basic_auth_header("wk_abc123") == "Basic d2tfYWJjMTIzOg=="


@pytest.mark.asyncio
async def test_send_identify_end_to_end(ready_context, identify_payload):
    recorder = Recorder()

    response = await make_dispatcher(ready_context, recorder).send(identify_payload)

    assert response.status_code == 200
    request = recorder.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://dp.example.com/v1/identify"
    assert request.headers["Authorization"] == "Basic d2tfYWJjMTIzOg=="
    assert request.headers["Content-Type"] == "application/json"
    body = json.loads(request.content)
    assert body["userId"] == "u1"
    assert body["event"] == "test"
    assert "timestamp" in body


@pytest.mark.asyncio
async def test_trailing_slash_on_data_plane_url(context, identify_payload):
    context.set_write_key("wk")
    context.set_data_plane_url("https://dp.example.com/")
    recorder = Recorder()

    await make_dispatcher(context, recorder).send(identify_payload)

    assert str(recorder.requests[0].url) == "https://dp.example.com/v1/identify"


@pytest.mark.asyncio
async def test_other_event_types(ready_context, identify_payload):
    recorder = Recorder()

    await make_dispatcher(ready_context, recorder).send(identify_payload, event_type="track")

    assert recorder.requests[0].url.path == "/v1/track"


@pytest.mark.asyncio
async def test_unknown_event_type(ready_context, identify_payload):
    with pytest.raises(ValidationException, match="Unknown event type"):
        await make_dispatcher(ready_context, Recorder()).send(identify_payload, "nope")


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["write_key", "data_plane_url"])
async def test_fails_fast_without_credentials(context, identify_payload, missing):
    if missing != "write_key":
        context.set_write_key("wk")
    if missing != "data_plane_url":
        context.set_data_plane_url("https://dp.example.com")
    recorder = Recorder()

    with pytest.raises(ValueNotSetException):
        await make_dispatcher(context, recorder).send(identify_payload)

    assert recorder.requests == []


@pytest.mark.asyncio
async def test_error_status_raises_api_error(ready_context, identify_payload):
    recorder = Recorder(status_code=401, body={"error": "Invalid write key"})

    with pytest.raises(ApiException) as exc_info:
        await make_dispatcher(ready_context, recorder).send(identify_payload)

    assert exc_info.value.status_code == 401
    assert "Invalid write key" in exc_info.value.body
    assert "API Error 401" in str(exc_info.value)


@pytest.mark.asyncio
async def test_non_error_status_is_returned(ready_context, identify_payload):
    recorder = Recorder(status_code=202, body={})

    response = await make_dispatcher(ready_context, recorder).send(identify_payload)

    assert response.status_code == 202


@pytest.mark.asyncio
async def test_transport_failure_raises_network_error(ready_context, identify_payload):
    cause = httpx.ConnectError("connection refused")
    recorder = Recorder(error=cause)

    with pytest.raises(NetworkException) as exc_info:
        await make_dispatcher(ready_context, recorder).send(identify_payload)

    assert exc_info.value.cause is cause
    assert exc_info.value.url == "https://dp.example.com/v1/identify"


@pytest.mark.asyncio
async def test_dispatcher_is_never_retrying(ready_context, identify_payload):
    recorder = Recorder(status_code=503)

    with pytest.raises(ApiException):
        await make_dispatcher(ready_context, recorder).send(identify_payload)

    assert len(recorder.requests) == 1


def test_default_timeout(context):
    assert EventDispatcher(context).timeout == 30.0
