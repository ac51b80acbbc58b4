"""Cloud Messaging client for the legacy HTTP send endpoint."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from fireadmin.adapters.http import HttpResponse, HttpTransport
from fireadmin.domain.messages import ensure_valid_message, normalize_topic
from fireadmin.errors import ConfigurationError, InvalidArgumentError, MessageValidationError, TransportError
from fireadmin.schemas.messaging import Message, Response, TopicManagementRequest

logger = logging.getLogger(__name__)


class Messaging:
    """Sends messages with a static server API key."""

    def __init__(
        self,
        transport: HttpTransport,
        *,
        api_key: str | None,
        send_url: str,
        topic_url: str,
        timeout: float | None = None,
    ) -> None:
        self._transport = transport
        self._api_key = api_key
        self._send_url = send_url
        self._topic_url = topic_url.rstrip("/")
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        if not self._api_key:
            raise ConfigurationError("fcm: an api key is required to send messages")
        return {"Authorization": f"key={self._api_key}", "Content-Type": "application/json"}

    # Sending

    def send_to_device(self, registration_token: str, message: Message) -> Response:
        return self._send(
            message.model_copy(update={"to": registration_token, "registration_ids": None, "condition": None})
        )

    def send_to_devices(self, registration_tokens: list[str], message: Message) -> Response:
        return self._send(
            message.model_copy(update={"to": None, "registration_ids": list(registration_tokens), "condition": None})
        )

    def send_to_device_group(self, notification_key: str, message: Message) -> Response:
        return self.send_to_device(notification_key, message)

    def send_to_topic(self, topic: str, message: Message) -> Response:
        return self.send_to_device(normalize_topic(topic), message)

    def send_to_condition(self, condition: str, message: Message) -> Response:
        return self._send(message.model_copy(update={"to": None, "registration_ids": None, "condition": condition}))

    def _send(self, message: Message) -> Response:
        try:
            ensure_valid_message(message)
        except MessageValidationError as exc:
            logger.info("fcm.message_rejected reason=%s", exc.message)
            raise

        response = self._transport.request(
            "POST",
            self._send_url,
            json_body=message.to_payload(),
            headers=self._headers(),
            timeout=self._timeout,
        )
        result = self._decode(response, service="fcm.send")
        if result.failure:
            logger.info("fcm.sent success=%d failure=%d", result.success, result.failure)
        return result

    # Topic management

    def subscribe_to_topic(self, registration_tokens: list[str], topic: str) -> Response:
        return self._manage_topic("batchAdd", registration_tokens, topic)

    def unsubscribe_from_topic(self, registration_tokens: list[str], topic: str) -> Response:
        return self._manage_topic("batchRemove", registration_tokens, topic)

    def _manage_topic(self, operation: str, registration_tokens: list[str], topic: str) -> Response:
        if not registration_tokens:
            raise MessageValidationError("at least one registration token is required")
        request = TopicManagementRequest(to=normalize_topic(topic), registration_tokens=list(registration_tokens))
        response = self._transport.request(
            "POST",
            f"{self._topic_url}:{operation}",
            json_body=request.model_dump(),
            headers=self._headers(),
            timeout=self._timeout,
        )
        return self._decode(response, service=f"fcm.{operation}")

    def _decode(self, response: HttpResponse, *, service: str) -> Response:
        if response.status_code != 200:
            logger.warning("fcm.request_failed service=%s status=%s", service, response.status_code)
            _raise_for_fcm_status(response, service=service)

        payload: Any = response.json()
        try:
            return Response.model_validate(payload)
        except ValidationError as exc:
            raise TransportError(
                f"{service}: unexpected response shape: {exc}",
                code="MALFORMED_RESPONSE",
                status_code=response.status_code,
            ) from exc


def _raise_for_fcm_status(response: HttpResponse, *, service: str) -> None:
    status = response.status_code
    if status == 400:
        raise InvalidArgumentError(f"{service}: invalid parameters", status_code=status)
    if status == 401:
        raise TransportError(f"{service}: authentication error", code="UNAUTHENTICATED", status_code=status)
    raise TransportError(
        f"{service}: internal server error",
        code="HTTP_ERROR",
        status_code=status,
        retryable=True,
    )
