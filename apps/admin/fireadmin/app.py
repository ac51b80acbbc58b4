"""App construction and service accessors."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from fireadmin.adapters.credentials import ResolvedCredentials, ServiceAccountInput, resolve_credentials
from fireadmin.adapters.http import HttpTransport, RequestsTransport
from fireadmin.core.config import Settings, get_settings
from fireadmin.core.logging_safety import mask_token
from fireadmin.errors import ConfigurationError
from fireadmin.repositories.key_cache import Clock, KeyCache, utc_now
from fireadmin.services.accounts import AccountAdmin
from fireadmin.services.auth import Auth
from fireadmin.services.database import Database
from fireadmin.services.messaging import Messaging
from fireadmin.services.tokens import TokenCodec

logger = logging.getLogger(__name__)


class App:
    """Configured handle from which the Auth, Database and FCM clients are obtained.

    Accessors build their client on first use and return the same instance
    afterwards. ``messaging_transport`` carries the API-key header and must
    not attach OAuth2 credentials of its own.
    """

    def __init__(
        self,
        *,
        settings: Settings,
        credentials: ResolvedCredentials,
        transport: HttpTransport,
        messaging_transport: HttpTransport,
        project_id: str | None = None,
        database_url: str | None = None,
        api_key: str | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._settings = settings
        self._credentials = credentials
        self._transport = transport
        self._messaging_transport = messaging_transport
        self._project_id = project_id
        self._database_url = database_url
        self._api_key = api_key
        self._clock = clock

        self._lock = threading.Lock()
        self._auth: Auth | None = None
        self._database: Database | None = None
        self._messaging: Messaging | None = None

    @property
    def project_id(self) -> str | None:
        return self._project_id

    @property
    def database_url(self) -> str | None:
        return self._database_url

    @property
    def credentials(self) -> ResolvedCredentials:
        return self._credentials

    def auth(self) -> Auth:
        with self._lock:
            if self._auth is None:
                key_cache = KeyCache(
                    self._transport,
                    url=self._settings.public_keys_url,
                    timeout=self._settings.http_timeout_seconds,
                    clock=self._clock,
                )
                tokens = TokenCodec(
                    project_id=self._project_id,
                    key_cache=key_cache,
                    signing_key=self._credentials.signing_key,
                    signing_identity=self._credentials.signing_identity,
                    leeway_seconds=self._settings.token_leeway_seconds,
                    clock=self._clock,
                )
                accounts = AccountAdmin(
                    self._transport,
                    base_url=self._settings.relying_party_url,
                    timeout=self._settings.http_timeout_seconds,
                )
                self._auth = Auth(tokens=tokens, accounts=accounts, key_cache=key_cache)
            return self._auth

    def database(self) -> Database:
        with self._lock:
            if self._database is None:
                if not self._database_url:
                    raise ConfigurationError("firebase: a database url is required to use the database")
                self._database = Database(
                    self._transport,
                    url=self._database_url,
                    timeout=self._settings.database_timeout_seconds,
                )
            return self._database

    def fcm(self) -> Messaging:
        with self._lock:
            if self._messaging is None:
                self._messaging = Messaging(
                    self._messaging_transport,
                    api_key=self._api_key,
                    send_url=self._settings.fcm_send_url,
                    topic_url=self._settings.fcm_topic_url,
                    timeout=self._settings.http_timeout_seconds,
                )
            return self._messaging

    def close(self) -> None:
        self._transport.close()
        if self._messaging_transport is not self._transport:
            self._messaging_transport.close()


def initialize_app(
    service_account: ServiceAccountInput | None = None,
    *,
    project_id: str | None = None,
    database_url: str | None = None,
    api_key: str | None = None,
    use_default_credentials: bool | None = None,
    settings: Settings | None = None,
    transport: HttpTransport | None = None,
    clock: Clock | None = None,
) -> App:
    """Build an App from explicit arguments, falling back to environment settings.

    Credentials come from exactly one source: ``service_account`` (inline
    JSON, a dict or a file path), then ``settings.service_account_file``,
    then application default credentials when enabled, else none. A given
    ``transport`` is used for every service, including messaging.
    """
    settings = settings or get_settings()

    if service_account is None and settings.service_account_file:
        service_account = Path(settings.service_account_file)
    if use_default_credentials is None:
        use_default_credentials = settings.use_default_credentials

    credentials = resolve_credentials(service_account, use_default=use_default_credentials)
    resolved_api_key = api_key or settings.api_key

    if transport is None:
        transport = RequestsTransport(
            credentials.google_credentials,
            default_timeout=settings.http_timeout_seconds,
            bearer_in_url=settings.database_token_in_url,
        )
        messaging_transport: HttpTransport = RequestsTransport(default_timeout=settings.http_timeout_seconds)
    else:
        messaging_transport = transport

    app = App(
        settings=settings,
        credentials=credentials,
        transport=transport,
        messaging_transport=messaging_transport,
        project_id=project_id or settings.project_id or credentials.project_id,
        database_url=database_url or settings.database_url,
        api_key=resolved_api_key,
        clock=clock or utc_now,
    )
    logger.info(
        "app.initialized project_configured=%s can_sign=%s database_configured=%s api_key=%s",
        bool(app.project_id),
        credentials.can_sign,
        bool(app.database_url),
        mask_token(resolved_api_key),
    )
    return app
