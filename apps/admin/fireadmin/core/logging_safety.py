"""Helpers that keep identifiers and credentials out of log lines."""

from __future__ import annotations

import hashlib
from typing import Any

_VISIBLE_TOKEN_CHARS = 6


def safe_log_identifier(value: Any, *, prefix: str) -> str:
    """Return a stable, non-reversible tag for a uid, kid or path."""
    text = str(value or "").strip()
    if not text:
        return f"{prefix}-missing"

    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]
    return f"{prefix}-{digest}"


def mask_token(token: str | None) -> str:
    """Keep only the tail of a bearer token, API key or JWT."""
    if not token:
        return "<none>"
    if len(token) <= _VISIBLE_TOKEN_CHARS:
        return "*" * len(token)
    return f"...{token[-_VISIBLE_TOKEN_CHARS:]}"
