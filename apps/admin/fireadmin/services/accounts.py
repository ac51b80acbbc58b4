"""User account administration over the relying-party REST surface."""

from __future__ import annotations

import logging
from typing import Any, Iterator, TypeVar

from pydantic import BaseModel, ValidationError

from fireadmin.adapters.http import HttpTransport, raise_for_status
from fireadmin.core.logging_safety import safe_log_identifier
from fireadmin.errors import FirebaseError, RequireUserIdError, TransportError
from fireadmin.schemas.user import (
    CreateAuthUriResponse,
    DownloadAccountResponse,
    GetAccountInfoResponse,
    LocalIdResponse,
    UploadAccountResponse,
    User,
    UserRecord,
    VerifyAssertionResponse,
)

logger = logging.getLogger(__name__)

_ResponseT = TypeVar("_ResponseT", bound=BaseModel)


def _compact(payload: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


class AccountAdmin:
    def __init__(self, transport: HttpTransport, *, base_url: str, timeout: float | None = None) -> None:
        self._transport = transport
        self._base_url = base_url if base_url.endswith("/") else base_url + "/"
        self._timeout = timeout

    def _call(self, method: str, payload: dict[str, Any], response_model: type[_ResponseT]) -> _ResponseT:
        response = self._transport.request(
            "POST",
            self._base_url + method,
            json_body=payload,
            timeout=self._timeout,
        )
        try:
            raise_for_status(response, service=f"relyingparty.{method}")
        except TransportError as exc:
            logger.warning("accounts.request_failed method=%s status=%s", method, exc.status_code)
            raise

        body = response.json() if response.body.strip() else {}
        try:
            return response_model.model_validate(body)
        except ValidationError as exc:
            raise TransportError(
                f"relyingparty.{method}: unexpected response shape: {exc}",
                code="MALFORMED_RESPONSE",
                status_code=response.status_code,
            ) from exc

    # Lookup

    def _get_account_info(self, field: str, values: list[str]) -> list[UserRecord]:
        if not values:
            return []
        return self._call("getAccountInfo", {field: values}, GetAccountInfoResponse).users

    def get_users(self, user_ids: list[str]) -> list[UserRecord]:
        return self._get_account_info("localId", user_ids)

    def get_user(self, user_id: str) -> UserRecord | None:
        if not user_id:
            raise RequireUserIdError()
        users = self.get_users([user_id])
        return users[0] if users else None

    def get_users_by_email(self, emails: list[str]) -> list[UserRecord]:
        return self._get_account_info("email", emails)

    def get_user_by_email(self, email: str) -> UserRecord | None:
        users = self.get_users_by_email([email])
        return users[0] if users else None

    def get_users_by_phone_number(self, phone_numbers: list[str]) -> list[UserRecord]:
        return self._get_account_info("phoneNumber", phone_numbers)

    def get_user_by_phone_number(self, phone_number: str) -> UserRecord | None:
        users = self.get_users_by_phone_number([phone_number])
        return users[0] if users else None

    # Mutations

    def create_user(self, user: User) -> UserRecord | None:
        """Create an account; the server generates the ID unless ``user.user_id`` is set."""
        if user.user_id:
            user_id = self._create_user_with_id(user)
        else:
            user_id = self._create_user_auto_id(user)
        logger.info("accounts.created uid=%s", safe_log_identifier(user_id, prefix="uid"))
        return self.get_user(user_id)

    def _create_user_auto_id(self, user: User) -> str:
        payload = _compact(
            {
                "email": user.email,
                "emailVerified": user.email_verified,
                "password": user.password,
                "displayName": user.display_name,
                "photoUrl": user.photo_url,
                "phoneNumber": user.phone_number,
                "disabled": user.disabled,
            }
        )
        result = self._call("signupNewUser", payload, LocalIdResponse)
        if not result.local_id:
            raise FirebaseError("firebaseauth: create account error", code="CREATE_USER_FAILED")
        return result.local_id

    def _create_user_with_id(self, user: User) -> str:
        record = _compact(
            {
                "localId": user.user_id,
                "email": user.email,
                "emailVerified": user.email_verified,
                "rawPassword": user.password,
                "displayName": user.display_name,
                "photoUrl": user.photo_url,
                "phoneNumber": user.phone_number,
                "disabled": user.disabled,
            }
        )
        payload = {"users": [record], "allowOverwrite": False, "sanityCheck": True}
        result = self._call("uploadAccount", payload, UploadAccountResponse)
        if result.error:
            raise FirebaseError(
                "firebaseauth: create user error",
                code="CREATE_USER_FAILED",
                details={"errors": [item.model_dump() for item in result.error]},
            )
        return user.user_id

    def update_user(self, user: User) -> UserRecord | None:
        if not user.user_id:
            raise RequireUserIdError()
        payload = _compact(
            {
                "localId": user.user_id,
                "email": user.email,
                "emailVerified": user.email_verified,
                "password": user.password,
                "displayName": user.display_name,
                "photoUrl": user.photo_url,
                "disableUser": user.disabled,
            }
        )
        result = self._call("setAccountInfo", payload, LocalIdResponse)
        return self.get_user(result.local_id or user.user_id)

    def delete_user(self, user_id: str) -> None:
        if not user_id:
            raise RequireUserIdError()
        self._call("deleteAccount", {"localId": user_id}, LocalIdResponse)
        logger.info("accounts.deleted uid=%s", safe_log_identifier(user_id, prefix="uid"))

    # Listing

    def list_users(self, max_results: int = 1000) -> ListUsersCursor:
        return ListUsersCursor(self, max_results=max_results)

    def download_accounts(self, max_results: int, page_token: str | None) -> DownloadAccountResponse:
        payload = _compact({"maxResults": max_results, "nextPageToken": page_token or None})
        return self._call("downloadAccount", payload, DownloadAccountResponse)

    # Sign-in helpers

    def verify_password(self, email: str, password: str) -> str:
        """Check an email/password pair and return the account's user ID."""
        payload = {"email": email, "password": password, "returnSecureToken": False}
        return self._call("verifyPassword", payload, LocalIdResponse).local_id

    def send_password_reset_email(self, email: str) -> None:
        self._call(
            "getOobConfirmationCode",
            {"email": email, "requestType": "PASSWORD_RESET"},
            LocalIdResponse,
        )

    def create_auth_uri(self, provider_id: str, continue_uri: str, session_id: str) -> str:
        payload = {"providerId": provider_id, "continueUri": continue_uri, "sessionId": session_id}
        return self._call("createAuthUri", payload, CreateAuthUriResponse).auth_uri

    def verify_assertion(self, request_uri: str, session_id: str) -> VerifyAssertionResponse:
        payload = {"requestUri": request_uri, "sessionId": session_id, "returnSecureToken": False}
        return self._call("verifyAssertion", payload, VerifyAssertionResponse)


class ListUsersCursor:
    """Page-by-page iteration over all accounts.

    ``max_results`` may be changed between pages. ``next()`` raises
    ``StopIteration`` once the server returns an empty page or the last
    page carried no continuation token.
    """

    def __init__(self, accounts: AccountAdmin, *, max_results: int) -> None:
        self._accounts = accounts
        self._page_token: str | None = None
        self._done = False
        self.max_results = max_results

    def next(self) -> list[UserRecord]:
        if self._done:
            raise StopIteration
        page = self._accounts.download_accounts(self.max_results, self._page_token)
        if not page.users:
            self._done = True
            raise StopIteration
        self._page_token = page.next_page_token
        # Without a cursor the next request would restart from the first page.
        if not page.next_page_token:
            self._done = True
        return page.users

    __next__ = next

    def __iter__(self) -> Iterator[list[UserRecord]]:
        return self
