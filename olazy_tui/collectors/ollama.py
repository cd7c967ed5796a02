"""Ollama model collector for the tags (installed) and ps (running) endpoints."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from olazy_tui.collectors import (
    DEFAULT_BASE_URL,
    BackendError,
    Deadline,
    DecodeError,
    TransportError,
)
from olazy_tui.models import Model

logger = logging.getLogger(__name__)

TAGS_PATH = "/api/tags"
PS_PATH = "/api/ps"


def _request_timeout(deadline: Deadline) -> httpx.Timeout | None:
    remaining = deadline.remaining()
    if remaining is None:
        return None
    return httpx.Timeout(remaining)


def _field(item: dict[str, Any], key: str, kind: type, default: Any, label: str) -> Any:
    value = item.get(key)
    if value is None:
        return default
    # bool is an int subclass but never a valid size
    if not isinstance(value, kind) or isinstance(value, bool):
        raise DecodeError(f"{label}: field {key!r} has unexpected type {type(value).__name__}")
    return value


def parse_models(payload: Any, label: str = "models") -> tuple[Model, ...]:
    if not isinstance(payload, dict):
        raise DecodeError(f"{label}: expected a JSON object")

    raw = payload.get("models")
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise DecodeError(f"{label}: 'models' is not an array")

    models = []
    for item in raw:
        if not isinstance(item, dict):
            raise DecodeError(f"{label}: model entry is not an object")
        models.append(
            Model(
                name=_field(item, "name", str, "", label),
                digest=_field(item, "digest", str, "", label),
                size=_field(item, "size", int, 0, label),
            )
        )
    return tuple(models)


class OllamaClient:
    """Read-only client for the model listing endpoints.

    The underlying ``httpx.Client`` is the shared connection pool and has no
    timeout of its own; every call is bounded by the ``Deadline`` it is given.
    Calls are single-attempt.
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL, http: httpx.Client | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_http = http is None
        self._http = http or httpx.Client(
            timeout=None,
            limits=httpx.Limits(max_connections=10, max_keepalive_connections=4),
        )

    def __enter__(self) -> "OllamaClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def list_installed(self, deadline: Deadline) -> tuple[Model, ...]:
        return self._list_models("tags", TAGS_PATH, deadline)

    def list_running(self, deadline: Deadline) -> tuple[Model, ...]:
        return self._list_models("ps", PS_PATH, deadline)

    @staticmethod
    def _read_body(label: str, resp: httpx.Response, deadline: Deadline) -> bytes:
        # httpx timeouts restart on every chunk, so a trickling body is only
        # bounded by checking the deadline between chunks
        body = bytearray()
        for chunk in resp.iter_bytes():
            if deadline.expired:
                raise TransportError(f"{label}: deadline exceeded")
            body.extend(chunk)
        return bytes(body)

    def _list_models(self, label: str, path: str, deadline: Deadline) -> tuple[Model, ...]:
        if deadline.expired:
            raise TransportError(f"{label}: deadline exceeded")

        url = f"{self.base_url}{path}"
        logger.debug("GET %s", url)
        try:
            with self._http.stream("GET", url, timeout=_request_timeout(deadline)) as resp:
                if resp.status_code != httpx.codes.OK:
                    raise BackendError(f"{label}: {resp.status_code} {resp.reason_phrase}", resp.status_code)
                body = self._read_body(label, resp, deadline)
        except httpx.TimeoutException as exc:
            raise TransportError(f"{label}: request timed out") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(f"{label}: {exc}") from exc

        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise DecodeError(f"{label}: invalid JSON body: {exc}") from exc
        return parse_models(payload, label)
