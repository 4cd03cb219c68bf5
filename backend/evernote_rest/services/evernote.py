"""
Evernote REST — Evernote Connection Service
=============================================

What:  Builds the per-request NoteStore/UserStore operation targets.
How:   Resolves the access token and store URLs from configuration and the
       evernote-rest-* request headers, then wraps a Thrift-generated client
       (Evernote SDK) in a StoreOperations handle.
Who:   Used by the store route through FastAPI dependency injection.
When:  Once per request; nothing is shared between requests.

Token resolution (first match wins):
    1. EVERNOTE_ALWAYS_USE_TOKEN_FROM_CONFIG   → configured token, headers ignored
    2. evernote-rest-accesstoken header       → header token
    3. EVERNOTE_FALLBACK_TO_TOKEN_FROM_CONFIG  → configured token
    4. otherwise                               → MissingAccessTokenError (401)

Note store URL:
    When evernote-rest-notestoreurl, evernote-rest-webapiurlprefix and
    evernote-rest-userid are ALL present, the note store URL is taken from
    the header; otherwise it is looked up with UserStore.getNoteStoreUrl().
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Tuple

from thrift.protocol import TBinaryProtocol
from thrift.transport import THttpClient

from evernote_rest.config import EvernoteEnvironment, Settings, settings
from evernote_rest.dispatch.registry import OperationRegistry
from evernote_rest.dispatch.thrift import ThriftStoreClient
from evernote_rest.exceptions import MissingAccessTokenError, StoreConnectionError

logger = logging.getLogger(__name__)

ACCESS_TOKEN_HEADER = "evernote-rest-accesstoken"
NOTE_STORE_URL_HEADER = "evernote-rest-notestoreurl"
WEB_API_URL_PREFIX_HEADER = "evernote-rest-webapiurlprefix"
USER_ID_HEADER = "evernote-rest-userid"


class StoreKind(str, Enum):
    """The path segment selecting which store an operation runs against."""

    NOTE_STORE = "noteStore"
    USER_STORE = "userStore"


@dataclass(frozen=True)
class StoreCredentials:
    access_token: Optional[str]
    note_store_url: Optional[str] = None
    web_api_url_prefix: Optional[str] = None
    user_id: Optional[str] = None


def resolve_credentials(headers: Mapping[str, str], config: Settings = settings) -> StoreCredentials:
    """
    Work out the token and store location for one request.

    Args:
        headers: Request headers (Starlette headers are case-insensitive).
        config:  Application settings.
    """
    if config.evernote_always_use_token_from_config:
        return StoreCredentials(access_token=config.evernote_access_token or None)

    token = headers.get(ACCESS_TOKEN_HEADER)
    if token is None and config.evernote_fallback_to_token_from_config:
        token = config.evernote_access_token or None

    note_store_url = headers.get(NOTE_STORE_URL_HEADER)
    web_api_url_prefix = headers.get(WEB_API_URL_PREFIX_HEADER)
    user_id = headers.get(USER_ID_HEADER)
    if note_store_url and web_api_url_prefix and user_id:
        return StoreCredentials(
            access_token=token,
            note_store_url=note_store_url,
            web_api_url_prefix=web_api_url_prefix,
            user_id=user_id,
        )
    return StoreCredentials(access_token=token)


def store_client_classes() -> Tuple[type, type]:
    """
    The SDK's generated (NoteStore.Client, UserStore.Client) classes.

    Imported on first use so the dispatch core and its tests do not need the
    Evernote SDK installed.
    """
    try:
        from evernote.edam.notestore import NoteStore
        from evernote.edam.userstore import UserStore
    except ImportError as exc:
        raise StoreConnectionError(
            message="The Evernote SDK is not installed (pip install 'evernote-rest[evernote]').",
            cause=exc,
        ) from exc
    return NoteStore.Client, UserStore.Client


def register_store_clients(registry: OperationRegistry) -> None:
    """Describe both store clients up front so the first request pays nothing."""
    for client_class in store_client_classes():
        registry.register(client_class)


class StoreOperations:
    """
    Operation target for one store in one request.

    The handle itself exposes no operations; dispatch goes through
    get_store_client(), which returns the concrete ThriftStoreClient. The
    generated client class is known up front, so an operation can be looked
    up before the client (and its connection) is built.
    """

    def __init__(
        self,
        kind: StoreKind,
        factory: Callable[[], ThriftStoreClient],
        client_class: Optional[type] = None,
    ):
        self.kind = kind
        self.client_class = client_class
        self._factory = factory
        self._store_client: Optional[ThriftStoreClient] = None

    def get_store_client_class(self) -> Optional[type]:
        return self.client_class

    def get_store_client(self) -> ThriftStoreClient:
        if self._store_client is None:
            self._store_client = self._factory()
        return self._store_client

    def __repr__(self) -> str:
        return f"StoreOperations({self.kind.value})"


class EvernoteStores:
    """
    Builds the NoteStore and UserStore handles for one set of credentials.

    Attributes:
        credentials:  Token and optional header-supplied store location
        environment:  Sandbox or production
        user_agent:   Sent with every Thrift HTTP request
    """

    def __init__(
        self,
        credentials: StoreCredentials,
        environment: EvernoteEnvironment = EvernoteEnvironment.SANDBOX,
        user_agent: str = settings.evernote_user_agent,
        client_classes: Callable[[], Tuple[type, type]] = store_client_classes,
    ):
        if not credentials.access_token:
            raise MissingAccessTokenError()
        self.credentials = credentials
        self.environment = environment
        self.user_agent = user_agent
        self._client_classes = client_classes

    @classmethod
    def from_headers(cls, headers: Mapping[str, str], config: Settings = settings) -> "EvernoteStores":
        return cls(
            credentials=resolve_credentials(headers, config),
            environment=config.evernote_environment,
            user_agent=config.evernote_user_agent,
        )

    def store(self, kind: StoreKind) -> StoreOperations:
        if kind is StoreKind.NOTE_STORE:
            return self.note_store()
        return self.user_store()

    def user_store(self) -> StoreOperations:
        _, user_store_class = self._client_classes()
        return StoreOperations(StoreKind.USER_STORE, self._user_store_client, user_store_class)

    def note_store(self) -> StoreOperations:
        note_store_class, _ = self._client_classes()
        return StoreOperations(StoreKind.NOTE_STORE, self._note_store_client, note_store_class)

    # ── Thrift plumbing ───────────────────────────────────────────────────

    def _thrift_client(self, client_class: type, url: str) -> Any:
        transport = THttpClient.THttpClient(url)
        transport.setCustomHeaders({"User-Agent": self.user_agent})
        protocol = TBinaryProtocol.TBinaryProtocol(transport)
        return client_class(protocol)

    def _user_store_client(self) -> ThriftStoreClient:
        _, user_store_class = self._client_classes()
        client = self._thrift_client(user_store_class, self.environment.user_store_url)
        return ThriftStoreClient(client, self.credentials.access_token)

    def note_store_url(self) -> str:
        """Header-supplied URL, or the one UserStore reports for this token."""
        if self.credentials.note_store_url:
            logger.debug(
                "Using note store URL from headers for user %s (web API prefix %s)",
                self.credentials.user_id, self.credentials.web_api_url_prefix,
            )
            return self.credentials.note_store_url

        user_store = self._user_store_client()
        try:
            url = user_store.client.getNoteStoreUrl(self.credentials.access_token)
        except Exception as exc:
            logger.warning("getNoteStoreUrl failed: %s: %s", type(exc).__name__, exc)
            raise StoreConnectionError(
                message="Could not look up the note store URL for this access token.",
                cause=exc,
                context={"cause_type": type(exc).__name__},
            ) from exc
        logger.debug("Resolved note store URL %s", url)
        return url

    def _note_store_client(self) -> ThriftStoreClient:
        note_store_class, _ = self._client_classes()
        client = self._thrift_client(note_store_class, self.note_store_url())
        return ThriftStoreClient(client, self.credentials.access_token)
