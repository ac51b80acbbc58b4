"""Auth handle: token minting/verification plus account administration."""

from __future__ import annotations

from typing import Any

from fireadmin.repositories.key_cache import KeyCache
from fireadmin.schemas.auth import IdTokenClaims
from fireadmin.schemas.user import User, UserRecord, VerifyAssertionResponse
from fireadmin.services.accounts import AccountAdmin, ListUsersCursor
from fireadmin.services.tokens import TokenCodec


class Auth:
    """Facade over the token codec and the account admin client.

    Each instance owns its key cache; two apps never share fetched keys.
    """

    def __init__(self, *, tokens: TokenCodec, accounts: AccountAdmin, key_cache: KeyCache) -> None:
        self._tokens = tokens
        self._accounts = accounts
        self._key_cache = key_cache

    @property
    def key_cache(self) -> KeyCache:
        return self._key_cache

    # Tokens

    def create_custom_token(self, user_id: str, claims: Any = None) -> str:
        return self._tokens.create_custom_token(user_id, claims)

    def verify_id_token(self, id_token: str) -> IdTokenClaims:
        return self._tokens.verify_id_token(id_token)

    # Accounts

    def get_user(self, user_id: str) -> UserRecord | None:
        return self._accounts.get_user(user_id)

    def get_users(self, user_ids: list[str]) -> list[UserRecord]:
        return self._accounts.get_users(user_ids)

    def get_user_by_email(self, email: str) -> UserRecord | None:
        return self._accounts.get_user_by_email(email)

    def get_users_by_email(self, emails: list[str]) -> list[UserRecord]:
        return self._accounts.get_users_by_email(emails)

    def get_user_by_phone_number(self, phone_number: str) -> UserRecord | None:
        return self._accounts.get_user_by_phone_number(phone_number)

    def get_users_by_phone_number(self, phone_numbers: list[str]) -> list[UserRecord]:
        return self._accounts.get_users_by_phone_number(phone_numbers)

    def create_user(self, user: User) -> UserRecord | None:
        return self._accounts.create_user(user)

    def update_user(self, user: User) -> UserRecord | None:
        return self._accounts.update_user(user)

    def delete_user(self, user_id: str) -> None:
        self._accounts.delete_user(user_id)

    def list_users(self, max_results: int = 1000) -> ListUsersCursor:
        return self._accounts.list_users(max_results)

    # Sign-in helpers

    def verify_password(self, email: str, password: str) -> str:
        return self._accounts.verify_password(email, password)

    def send_password_reset_email(self, email: str) -> None:
        self._accounts.send_password_reset_email(email)

    def create_auth_uri(self, provider_id: str, continue_uri: str, session_id: str) -> str:
        return self._accounts.create_auth_uri(provider_id, continue_uri, session_id)

    def verify_assertion(self, request_uri: str, session_id: str) -> VerifyAssertionResponse:
        return self._accounts.verify_assertion(request_uri, session_id)
