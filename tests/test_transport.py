"""
Tests for the HTTP JSON-RPC transport.
"""
import json

import httpx
import pytest
import respx

from qtum_sdk.exceptions import (
    AuthorizationDeniedError,
    MethodNotAllowedError,
    RPCError,
    TransportError,
    UnauthorizedError,
    UnknownMethodError,
)
from qtum_sdk.rpc import HTTPTransport
from tests.test_helpers import TEST_QTUM_URL

NODE_URL = "http://localhost:3889/"


def rpc_result(result):
    return httpx.Response(200, json={"result": result, "error": None, "id": 0})


def test_invalid_url():
    with pytest.raises(ValueError, match="Invalid provider URL"):
        HTTPTransport("ftp://localhost:3889")


def test_url_credentials_are_stripped():
    transport = HTTPTransport(TEST_QTUM_URL)
    assert transport.url == NODE_URL
    assert transport.origin == "http://localhost:3889"


def test_timeout_from_environment(monkeypatch):
    monkeypatch.setenv("QTUM_SDK_RPC_TIMEOUT", "5")
    assert HTTPTransport(TEST_QTUM_URL).timeout == 5.0
    assert HTTPTransport(TEST_QTUM_URL, timeout=2).timeout == 2


@pytest.mark.asyncio
@respx.mock
async def test_raw_call_success():
    route = respx.post(NODE_URL).mock(return_value=rpc_result(1234))

    transport = HTTPTransport(TEST_QTUM_URL)
    result = await transport.raw_call("getblockcount")

    assert result == 1234
    request = route.calls.last.request
    body = json.loads(request.content)
    assert body["method"] == "getblockcount"
    assert body["params"] == []
    assert body["jsonrpc"] == "1.0"
    # qtum:test as basic auth
    assert request.headers["Authorization"] == "Basic cXR1bTp0ZXN0"
    await transport.aclose()


@pytest.mark.asyncio
@respx.mock
async def test_request_ids_increase():
    route = respx.post(NODE_URL).mock(return_value=rpc_result(None))

    async with HTTPTransport(TEST_QTUM_URL) as transport:
        await transport.raw_call("getinfo")
        await transport.raw_call("getinfo")

    ids = [json.loads(call.request.content)["id"] for call in route.calls]
    assert ids == [0, 1]


@pytest.mark.asyncio
@respx.mock
async def test_unauthorized():
    respx.post(NODE_URL).mock(return_value=httpx.Response(401))

    transport = HTTPTransport(TEST_QTUM_URL)
    with pytest.raises(UnauthorizedError):
        await transport.raw_call("getinfo")


@pytest.mark.asyncio
@respx.mock
async def test_unknown_method():
    respx.post(NODE_URL).mock(return_value=httpx.Response(404, text="Not found"))

    transport = HTTPTransport(TEST_QTUM_URL)
    with pytest.raises(UnknownMethodError, match="unknown method: nosuchmethod") as exc_info:
        await transport.raw_call("nosuchmethod")
    assert exc_info.value.method == "nosuchmethod"


@pytest.mark.asyncio
@respx.mock
async def test_method_not_allowed():
    respx.post(NODE_URL).mock(return_value=httpx.Response(405))

    transport = HTTPTransport(TEST_QTUM_URL)
    with pytest.raises(MethodNotAllowedError):
        await transport.raw_call("waitforlogs")


@pytest.mark.asyncio
@respx.mock
async def test_rpc_error():
    respx.post(NODE_URL).mock(return_value=httpx.Response(
        500,
        json={"result": None, "error": {"code": -5, "message": "Invalid address"}, "id": 0}
    ))

    transport = HTTPTransport(TEST_QTUM_URL)
    with pytest.raises(RPCError) as exc_info:
        await transport.raw_call("gethexaddress", ["bogus"])

    assert exc_info.value.code == -5
    assert exc_info.value.message == "Invalid address"
    assert str(exc_info.value) == "[-5] Invalid address"


@pytest.mark.asyncio
@respx.mock
async def test_non_json_error_response():
    respx.post(NODE_URL).mock(return_value=httpx.Response(500, text="boom"))

    transport = HTTPTransport(TEST_QTUM_URL)
    with pytest.raises(TransportError, match="500 Internal Server Error"):
        await transport.raw_call("getinfo")


@pytest.mark.asyncio
@respx.mock
async def test_network_error_is_wrapped():
    respx.post(NODE_URL).mock(side_effect=httpx.ConnectError("connection refused"))

    transport = HTTPTransport(TEST_QTUM_URL)
    with pytest.raises(TransportError, match="connection refused"):
        await transport.raw_call("getinfo")


@pytest.mark.asyncio
@respx.mock
async def test_authorization_accepted():
    route = respx.post(NODE_URL).mock(side_effect=[
        httpx.Response(402, json={"id": "auth-1"}),
        rpc_result({"txid": "abcd"}),
    ])
    respx.get("http://localhost:3889/api/authorizations/auth-1/onchange").mock(
        return_value=httpx.Response(200, json={"id": "auth-1", "state": "accepted"})
    )

    transport = HTTPTransport(TEST_QTUM_URL)
    result = await transport.raw_call("sendtocontract", ["aa", "bb"])

    assert result == {"txid": "abcd"}
    replayed = json.loads(route.calls.last.request.content)
    assert replayed["auth"] == "auth-1"
    assert replayed["method"] == "sendtocontract"


@pytest.mark.asyncio
@respx.mock
async def test_authorization_denied():
    respx.post(NODE_URL).mock(return_value=httpx.Response(402, json={"id": "auth-2"}))
    respx.get("http://localhost:3889/api/authorizations/auth-2/onchange").mock(
        return_value=httpx.Response(200, json={"id": "auth-2", "state": "denied"})
    )

    transport = HTTPTransport(TEST_QTUM_URL)
    with pytest.raises(AuthorizationDeniedError, match="Authorization denied: auth-2"):
        await transport.raw_call("sendtocontract", ["aa", "bb"])
