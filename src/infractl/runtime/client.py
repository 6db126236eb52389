"""Asynchronous API client used by generated commands.

:class:`ApiClient` wraps :class:`httpx.AsyncClient` with bearer-token
injection, retry with exponential backoff, and mapping of error statuses to
the :mod:`infractl.exceptions` hierarchy. It must be used as an async
context manager; one client is opened per command invocation.

:class:`ResourceClient` is the collaborator the command classes talk to. It
is built from a generated ``ROUTES`` table and exposes one method per
archetype call -- ``post``, ``get``, ``put``, ``delete``, ``get_page`` and
``get_all`` -- each taking its arguments positionally in the canonical
(sorted) order recorded in the route.
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional
from urllib.parse import quote

import httpx

from infractl import __version__
from infractl.exceptions import (
    ApiError,
    AuthError,
    ConfigError,
    ConnectionError_,
    NotFoundError,
    ServerError,
)
from infractl.models import CLIConfig, Route
from infractl.output import get_output

PAGE_TOKEN = "page_token"
LIMIT = "limit"


def base_url(host: str) -> str:
    """``api.example.com`` -> ``https://api.example.com``; explicit schemes are kept."""
    host = host.rstrip("/")
    if "://" in host:
        return host
    return f"https://{host}"


class ApiClient:
    """Asynchronous HTTP client for the infrastructure API.

    Args:
        config: Resolved settings providing ``host``, ``token``,
            ``timeout`` and ``max_retries``.
        transport: Optional httpx transport, used by tests to plug in
            :class:`httpx.MockTransport`.

    Raises:
        ConfigError: On entry, if no host is configured.

    Example::

        async with ApiClient(config) as api:
            disks = api.resource(ROUTES)
            page = await disks.get_page(30, "acme", "", "prod", None)
    """

    def __init__(
        self,
        config: CLIConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> ApiClient:
        if not self._config.host:
            raise ConfigError("No API host configured: set INFRACTL_HOST or pass --host")

        headers = {"User-Agent": f"infractl/{__version__}", "Accept": "application/json"}
        if self._config.token:
            headers["Authorization"] = f"Bearer {self._config.token}"

        self._client = httpx.AsyncClient(
            base_url=base_url(self._config.host),
            headers=headers,
            timeout=self._config.timeout,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Requests
    # ------------------------------------------------------------------ #

    def resource(self, routes: Mapping[str, Route]) -> ResourceClient:
        """Return the collaborator for one resource's route table."""
        return ResourceClient(self, routes)

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[Any] = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Returns:
            The decoded body, or ``None`` for an empty response.

        Raises:
            AuthError: On 401 / 403.
            NotFoundError: On 404.
            ServerError: On 5xx after all retries are exhausted.
            ApiError: On any other error status.
            ConnectionError_: On network / timeout errors after all retries.
        """
        get_output().debug(f"{method.upper()} {path} params={params or {}}")
        response = await self._execute_with_retry(method.upper(), path, params or {}, json_body)
        self._map_response_error(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def _execute_with_retry(
        self,
        method: str,
        path: str,
        params: dict[str, Any],
        json_body: Any,
    ) -> httpx.Response:
        """Execute the request with exponential-backoff retry.

        Retries on 5xx status codes and connection / timeout errors. The
        delay doubles each attempt: 1 s, 2 s, 4 s, ...
        """
        assert self._client is not None, "Client not initialised -- use as async context manager"

        max_retries = self._config.max_retries
        output = get_output()

        for attempt in range(max_retries + 1):
            try:
                kwargs: dict[str, Any] = {"method": method, "url": path, "params": params}
                if json_body is not None:
                    kwargs["json"] = json_body
                response = await self._client.request(**kwargs)
            except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    output.debug(
                        f"Connection error: {exc}, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    await asyncio.sleep(delay)
                    continue
                raise ConnectionError_(
                    f"Connection failed after {max_retries + 1} attempts: {exc}"
                ) from exc

            if response.status_code >= 500 and attempt < max_retries:
                delay = 2 ** attempt
                output.debug(
                    f"Server error {response.status_code}, retrying in {delay}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                await asyncio.sleep(delay)
                continue
            return response

        raise ServerError("Request failed after all retries")  # pragma: no cover

    @staticmethod
    def _map_response_error(response: httpx.Response) -> None:
        """Raise a typed exception for error HTTP status codes.

        The server's ``message`` is used verbatim when the body has one.
        """
        status = response.status_code
        if status < 400:
            return

        try:
            detail = response.json()
            if isinstance(detail, dict):
                msg = detail.get("message") or detail.get("error") or detail.get("detail") or ""
            else:
                msg = str(detail)
        except ValueError:
            msg = response.text[:200] if response.text else ""

        message = msg or f"HTTP {status}"
        if status in (401, 403):
            raise AuthError(message, status_code=status)
        if status == 404:
            raise NotFoundError(message, status_code=status)
        if status >= 500:
            raise ServerError(message, status_code=status)
        raise ApiError(message, status_code=status)


class ResourceClient:
    """Route-table driven calls for one resource.

    Each method looks up its route by name, pairs the positional arguments
    with ``route.arg_names`` and splits them into path parameters, query
    parameters and JSON body members. ``None`` values are never sent.
    """

    def __init__(self, api: ApiClient, routes: Mapping[str, Route]) -> None:
        self._api = api
        self._routes = routes

    async def post(self, *args: Any) -> Any:
        return await self._call("post", args)

    async def get(self, *args: Any) -> Any:
        return await self._call("get", args)

    async def put(self, *args: Any) -> Any:
        return await self._call("put", args)

    async def delete(self, *args: Any) -> Any:
        return await self._call("delete", args)

    async def get_page(self, *args: Any) -> dict[str, Any]:
        """Fetch one page: ``{"items": [...], "next_page": token-or-None}``."""
        page = await self._call("get_page", args)
        return page or {"items": [], "next_page": None}

    async def get_all(self, *args: Any) -> list[Any]:
        """Fetch every page in sequence, following ``next_page`` until it is empty.

        *args* follow the list route's order without ``limit`` and
        ``page_token``.
        """
        route = self._route("get_all")
        names = [n for n in route.arg_names if n not in (LIMIT, PAGE_TOKEN)]
        values = self._pair("get_all", names, args)

        items: list[Any] = []
        token: Optional[str] = None
        while True:
            if PAGE_TOKEN in route.arg_names:
                values[PAGE_TOKEN] = token
            page = await self._send(route, values) or {}
            items.extend(page.get("items") or [])
            token = page.get("next_page")
            if not token:
                return items

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _route(self, name: str) -> Route:
        key = "get_page" if name == "get_all" else name
        try:
            return self._routes[key]
        except KeyError:
            raise ApiError(f"This resource has no '{name}' operation") from None

    @staticmethod
    def _pair(name: str, names: list[str], args: tuple[Any, ...]) -> dict[str, Any]:
        if len(args) != len(names):
            raise TypeError(f"{name}() takes {len(names)} arguments ({len(args)} given)")
        return dict(zip(names, args))

    async def _call(self, name: str, args: tuple[Any, ...]) -> Any:
        route = self._route(name)
        return await self._send(route, self._pair(name, list(route.arg_names), args))

    async def _send(self, route: Route, values: dict[str, Any]) -> Any:
        path_values = {
            name: quote(str(values[name]), safe="") for name in route.path_params
        }
        path = route.path.format(**path_values)

        params = {
            name: values[name]
            for name in route.query_params
            if values.get(name) is not None and values.get(name) != ""
        }

        body: Optional[dict[str, Any]] = None
        if route.body_fields:
            body = {
                key: values[name]
                for name, key in route.body_fields.items()
                if values.get(name) is not None
            }

        return await self._api.request(route.method.value, path, params=params, json_body=body)
