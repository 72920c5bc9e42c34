"""HTTP binding for typed endpoints.

This module connects the pure marshalers to actual HTTP:

* **HTTPTransport** -- async client that builds a wire request, sends it
  with ``httpx`` and parses the typed response.
* **create_http_handler** -- factory that wraps an async endpoint
  implementation into a request handler suitable for an ASGI framework
  or a test harness.

Routing (deciding which endpoint a raw request is for) is left to the
caller: the handler receives path arguments that are already split out.
"""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Coroutine, Mapping, Sequence
from typing import Any, TypeVar

import httpx

from mxapi.core.config import MxApiConfig
from mxapi.core.errors import MxApiError
from mxapi.core.types import EndpointRequest, EndpointResponse, SendAccessToken
from mxapi.metadata.versions import SupportedVersionSet
from mxapi.wire.incoming import parse, parse_response
from mxapi.wire.messages import WireResponse, format_error_response
from mxapi.wire.outgoing import build, build_response

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=EndpointRequest)


# ---------------------------------------------------------------------------
# HTTPTransport (client)
# ---------------------------------------------------------------------------


class HTTPTransport:
    """HTTP client transport for typed endpoint requests.

    Every call opens a short-lived ``httpx.AsyncClient``; connection
    pooling and retries are out of scope.

    Parameters
    ----------
    base_url:
        Homeserver base URL (e.g. ``https://matrix.example.org``).
    credential:
        Access token holder, or a bare token.
    supported:
        Versions supported by the server.  Defaults to ``v1.1``.
    timeout:
        Request timeout in seconds (default: 30).
    transport:
        Optional ``httpx`` transport, e.g. ``httpx.MockTransport`` in
        tests.
    """

    def __init__(
        self,
        base_url: str,
        *,
        credential: SendAccessToken | str | None = None,
        supported: SupportedVersionSet | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._credential = SendAccessToken.coerce(credential)
        self._supported = supported or SupportedVersionSet.of("1.1")
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(
        cls,
        config: MxApiConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> HTTPTransport:
        return cls(
            config.base_url,
            credential=config.credential(),
            supported=config.supported(),
            timeout=config.request_timeout,
            transport=transport,
        )

    async def send(
        self,
        request: EndpointRequest,
        *,
        user_id: str | None = None,
    ) -> EndpointResponse:
        """Send *request* and return its typed response.

        Raises
        ------
        IntoHttpError
            If the request cannot be built (no marshaling error reaches
            the network).
        ServerError
            If the server answers with an error status.
        ResponseDecodingError
            If the response body does not fit the endpoint's response
            model.
        """
        wire = build(
            request,
            self._base_url,
            self._credential,
            self._supported,
            user_id=user_id,
        )
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.request(
                wire.method.value,
                wire.url,
                headers=wire.headers,
                content=wire.body or None,
            )
        logger.debug("%s %s -> %d", wire.method, wire.path, response.status_code)
        return parse_response(
            type(request).RESPONSE,
            response.status_code,
            response.headers,
            response.content,
        )


# ---------------------------------------------------------------------------
# HTTP Handler Factory (server-side)
# ---------------------------------------------------------------------------

HTTPHandler = Callable[
    [str, Sequence[str], str, Mapping[str, str], bytes],
    Coroutine[Any, Any, WireResponse],
]


def create_http_handler(
    request_cls: type[RequestT],
    endpoint: Callable[[RequestT], Awaitable[EndpointResponse]],
    config: MxApiConfig | None = None,
) -> HTTPHandler:
    """Create an async HTTP handler for one endpoint.

    The returned handler parses the incoming request into
    *request_cls*, awaits *endpoint* with it and serialises the typed
    response.  Every :class:`MxApiError` -- raised while parsing or by
    *endpoint* itself -- becomes a Matrix error response with the
    error's status code.

    Parameters
    ----------
    request_cls:
        Request model of the endpoint being served.
    endpoint:
        Async implementation returning the endpoint's response model.
    config:
        Server configuration (shim toggle, body size limit).

    Returns
    -------
    HTTPHandler
        An async function with signature
        ``(method, path_args, query_string, headers, body) -> WireResponse``.
    """
    config = config or MxApiConfig()

    async def handler(
        method: str,
        path_args: Sequence[str],
        query_string: str,
        headers: Mapping[str, str],
        body: bytes,
    ) -> WireResponse:
        try:
            request = parse(
                request_cls,
                method,
                path_args,
                query_string,
                headers,
                body,
                trailing_param_shim=config.trailing_param_shim,
                max_body_size=config.max_body_size_bytes,
            )
            response = await endpoint(request)
            return build_response(response)

        except MxApiError as exc:
            logger.info(
                "%s rejected: %s (%s)",
                request_cls.METADATA.name or request_cls.__name__,
                exc.errcode,
                exc.message,
            )
            return format_error_response(exc)

        except Exception:
            logger.exception(
                "Unhandled error in %s",
                request_cls.METADATA.name or request_cls.__name__,
            )
            return format_error_response(MxApiError("Internal server error"))

    return handler
