"""Session Guard - credential attachment and expired-session recovery for API calls.

Invariants:
    - A held credential is sent as `Authorization: Bearer <token>` on every request
    - No credential held -> no Authorization header added
    - A failure while attaching propagates and the request is never sent
    - 401 on a protected surface: credential evicted, then a full navigation to login
    - 401 on an auth or public surface: nothing but the error
    - Redirects are followed; every 4xx/5xx final response is raised to the caller
      as httpx.HTTPStatusError after the recovery policy has run
"""

import logging
from typing import Callable, Protocol

import httpx

from app.client.config import ClientSettings
from app.client.route_access import RouteAccess, classify_path
from app.client.token_store import FileTokenStore, TokenStore

logger = logging.getLogger(__name__)


class Navigator(Protocol):
    """Client-side location: where the user is, and how to leave."""
    def current_path(self) -> str: ...
    def replace(self, path: str) -> None: ...


class MemoryNavigator:
    """Navigator that records replacements instead of reloading a view."""

    def __init__(self, path: str = "/"):
        self.path = path
        self.replaced: list[str] = []

    def current_path(self) -> str:
        return self.path

    def replace(self, path: str) -> None:
        self.replaced.append(path)
        self.path = path


class SessionGuard:
    """Request/response interception policy shared by sync and async clients."""

    def __init__(
        self,
        store: TokenStore,
        navigator: Navigator,
        login_path: str = "/login",
        classify: Callable[[str], RouteAccess] = classify_path,
    ):
        self.store = store
        self.navigator = navigator
        self.login_path = login_path
        self.classify = classify

    def attach_credential(self, request: httpx.Request) -> None:
        token = self.store.get()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"

    def recover_session(self, response: httpx.Response) -> bool:
        """Apply the 401 policy. Returns True when the session was evicted."""
        if response.status_code != httpx.codes.UNAUTHORIZED:
            return False
        current = self.navigator.current_path()
        if self.classify(current) is not RouteAccess.PROTECTED:
            return False
        self.store.clear()
        logger.info(f"Session expired on {current}; redirecting to {self.login_path}")
        self.navigator.replace(self.login_path)
        return True

    def handle_response(self, response: httpx.Response) -> None:
        # Hooks fire on every redirect hop; only the final response is judged.
        if response.is_redirect:
            return
        response.read()
        self._settle(response)

    async def ahandle_response(self, response: httpx.Response) -> None:
        if response.is_redirect:
            return
        await response.aread()
        self._settle(response)

    def _settle(self, response: httpx.Response) -> None:
        self.recover_session(response)
        if response.is_error:
            response.raise_for_status()

    async def aattach_credential(self, request: httpx.Request) -> None:
        self.attach_credential(request)


def _default_guard(
    settings: ClientSettings,
    store: TokenStore | None,
    navigator: Navigator | None,
) -> SessionGuard:
    return SessionGuard(
        store or FileTokenStore(settings.token_path, settings.token_key),
        navigator or MemoryNavigator(),
        login_path=settings.login_path,
    )


def create_client(
    settings: ClientSettings | None = None,
    *,
    store: TokenStore | None = None,
    navigator: Navigator | None = None,
    guard: SessionGuard | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """httpx.Client bound to the storefront API with the guard installed."""
    settings = settings or ClientSettings()
    guard = guard or _default_guard(settings, store, navigator)
    return httpx.Client(
        base_url=settings.api_base_url,
        timeout=settings.timeout_seconds,
        follow_redirects=True,
        event_hooks={
            "request": [guard.attach_credential],
            "response": [guard.handle_response],
        },
        transport=transport,
    )


def create_async_client(
    settings: ClientSettings | None = None,
    *,
    store: TokenStore | None = None,
    navigator: Navigator | None = None,
    guard: SessionGuard | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Async counterpart of create_client()."""
    settings = settings or ClientSettings()
    guard = guard or _default_guard(settings, store, navigator)
    return httpx.AsyncClient(
        base_url=settings.api_base_url,
        timeout=settings.timeout_seconds,
        follow_redirects=True,
        event_hooks={
            "request": [guard.aattach_credential],
            "response": [guard.ahandle_response],
        },
        transport=transport,
    )
