"""
JSON-RPC transport for the Qtum SDK.

The RPC wrappers and engines only need ``raw_call(method, params)``; this
module provides that over HTTP, including the error mapping and the
authorization-challenge handshake used by wallet proxies (HTTP 402).

Cancellation: ``raw_call`` is a coroutine, so cancelling the task that awaits
it aborts the in-flight HTTP request. Long-poll calls rely on this.
"""
import itertools
import json
import logging
import urllib.parse
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

import httpx

from .. import config
from ..exceptions import (
    AuthorizationDeniedError,
    MethodNotAllowedError,
    RPCError,
    TransportError,
    UnauthorizedError,
    UnknownMethodError,
)
from ..version import __version__

logger = logging.getLogger(__name__)


class RPCTransport(ABC):
    """
    Abstract base class for RPC transports.

    Implementations map transport failures onto the ``TransportError``
    hierarchy and must be safe for concurrent logical calls.
    """

    @abstractmethod
    async def raw_call(
        self,
        method: str,
        params: Optional[Sequence[Any]] = None,
        long_poll: bool = False
    ) -> Any:
        """
        Perform a single RPC call and return its ``result``.

        Args:
            method: Node RPC method name
            params: Positional parameters
            long_poll: Disable the read timeout (the server holds the request open)

        Raises:
            TransportError: On any transport or RPC-level failure
        """
        pass

    @abstractmethod
    async def aclose(self) -> None:
        """Close any open connections."""
        pass


class HTTPTransport(RPCTransport):
    """JSON-RPC over HTTP using httpx."""

    def __init__(
        self,
        provider_url: str,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize the transport.

        Args:
            provider_url: Node URL; ``user:password@`` credentials become basic auth
            timeout: Request timeout in seconds (default: QTUM_SDK_RPC_TIMEOUT)
            client: Optional preconfigured httpx client (mainly for tests)

        Raises:
            ValueError: If the URL is not http(s)
        """
        parsed = urllib.parse.urlparse(provider_url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError(f"Invalid provider URL '{provider_url}'")

        netloc = parsed.hostname
        if parsed.port:
            netloc = f"{netloc}:{parsed.port}"
        self.origin = f"{parsed.scheme}://{netloc}"
        self.url = self.origin + (parsed.path or "/")

        auth = None
        if parsed.username or parsed.password:
            auth = httpx.BasicAuth(
                urllib.parse.unquote(parsed.username or ""),
                urllib.parse.unquote(parsed.password or "")
            )

        self.timeout = timeout if timeout is not None else config.rpc_timeout()
        self._id_nonce = itertools.count()
        self._client = client or httpx.AsyncClient(
            auth=auth,
            timeout=self.timeout,
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
                "User-Agent": f"qtum-sdk-python/{__version__}",
            },
        )
        logger.debug(f"Initialized HTTP transport for {self.url}")

    async def __aenter__(self) -> "HTTPTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def raw_call(
        self,
        method: str,
        params: Optional[Sequence[Any]] = None,
        long_poll: bool = False
    ) -> Any:
        rpc_call: Dict[str, Any] = {
            "jsonrpc": "1.0",
            "id": next(self._id_nonce),
            "method": method,
            "params": list(params) if params is not None else [],
        }
        timeout = None if long_poll else self.timeout

        logger.debug(f"RPC {method} {rpc_call['params']}")
        res = await self._post(rpc_call, timeout)

        if res.status_code == 402:
            auth = self._json(res)
            res = await self._auth_call(auth["id"], rpc_call, timeout)

        return self._handle_response(method, res)

    async def _post(self, rpc_call: Dict[str, Any], timeout: Optional[float]) -> httpx.Response:
        try:
            return await self._client.post(self.url, json=rpc_call, timeout=timeout)
        except httpx.HTTPError as e:
            raise TransportError(f"RPC request {rpc_call['method']} failed: {e}") from e

    async def _auth_call(
        self,
        auth_id: str,
        rpc_call: Dict[str, Any],
        timeout: Optional[float]
    ) -> httpx.Response:
        """Long-poll an authorization until its state changes, then replay the call."""
        logger.info(f"RPC call {rpc_call['method']} requires authorization {auth_id}")
        try:
            res = await self._client.get(
                f"{self.origin}/api/authorizations/{auth_id}/onchange",
                timeout=None
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Authorization request failed: {e}") from e

        data = self._json(res)
        if res.status_code != 200:
            raise TransportError(data.get("message", f"HTTP {res.status_code}"))

        state = data.get("state")
        if state == "accepted":
            return await self._post({**rpc_call, "auth": data["id"]}, timeout)
        raise AuthorizationDeniedError(auth_id)

    def _handle_response(self, method: str, res: httpx.Response) -> Any:
        if res.status_code == 401:
            raise UnauthorizedError(res.reason_phrase or "Unauthorized")

        if res.status_code == 404:
            raise UnknownMethodError(method)

        # Trying to call a Qtum method on an Ethereum endpoint
        if res.status_code == 405:
            raise MethodNotAllowedError(method)

        content_type = res.headers.get("content-type", "")
        if "application/json" not in content_type:
            if res.status_code != 200:
                raise TransportError(f"{res.status_code} {res.reason_phrase}\n{res.text[:256]}")

        body = self._json(res)
        if not isinstance(body, dict):
            raise TransportError(f"Invalid JSON-RPC response type: {type(body).__name__}")

        error = body.get("error")
        if error is not None:
            if isinstance(error, dict):
                raise RPCError(error.get("code", -32603), error.get("message", "Unknown error"), error.get("data"))
            raise TransportError(str(error))

        if res.status_code != 200:
            raise TransportError(f"{res.status_code} {res.reason_phrase}: {body}")

        return body.get("result")

    @staticmethod
    def _json(res: httpx.Response) -> Any:
        try:
            return res.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise TransportError(f"Non-JSON response (HTTP {res.status_code}): {res.text[:256]}") from e
