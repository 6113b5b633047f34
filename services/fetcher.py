"""One round trip to the remote reading source."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError

from app.schemas import ReadingPayload
from models.records import Reading

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """A poll cycle that produced no usable dataset."""

    def __init__(self, reason: str, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.reason = reason
        self.cause = cause


@dataclass
class FetchResult:
    sequence: int
    readings: Optional[List[Reading]] = None
    error: Optional[FetchError] = None
    dropped_count: int = 0
    completed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def ok(self) -> bool:
        return self.error is None and self.readings is not None


def _describe_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "record"
    return f"{location}: {first.get('msg', 'invalid value')}"


class FetchCycle:
    """Fetches the full reading list and validates each record.

    ``fetch`` never raises on network, HTTP or payload problems; it reports them
    through ``FetchResult.error`` instead.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str,
        timeout: float,
        strict: bool = False,
    ) -> None:
        self._client = client
        self.url = url
        self.timeout = timeout
        self.strict = strict

    async def fetch(self, sequence: int = 0) -> FetchResult:
        try:
            readings, dropped = await asyncio.wait_for(self._fetch_once(), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            error = FetchError("timeout", f"Request to {self.url} timed out after {self.timeout}s.", exc)
        except FetchError as exc:
            error = exc
        else:
            logger.debug(
                "Fetched readings",
                extra={"sequence": sequence, "reading_count": len(readings), "dropped_count": dropped or None},
            )
            return FetchResult(sequence=sequence, readings=readings, dropped_count=dropped)

        response = getattr(error.cause, "response", None)
        logger.warning(
            "Fetch cycle failed: %s",
            error,
            extra={
                "sequence": sequence,
                "reason": error.reason,
                "status_code": getattr(response, "status_code", None),
            },
        )
        return FetchResult(sequence=sequence, error=error)

    async def _fetch_once(self) -> tuple[List[Reading], int]:
        if self._client.is_closed:
            raise FetchError("network", "HTTP client is closed.")
        try:
            response = await self._client.get(self.url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                "http_status",
                f"Source responded with status {exc.response.status_code}.",
                exc,
            ) from exc
        except httpx.TimeoutException as exc:
            raise FetchError("timeout", f"Request to {self.url} timed out.", exc) from exc
        except httpx.HTTPError as exc:
            raise FetchError("network", f"Request to {self.url} failed: {exc}", exc) from exc
        except (httpx.InvalidURL, httpx.StreamError) as exc:
            raise FetchError("network", f"Request to {self.url} failed: {exc}", exc) from exc

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise FetchError("invalid_json", "Source response is not valid JSON.", exc) from exc

        return self.parse_records(payload)

    def parse_records(self, payload: Any) -> tuple[List[Reading], int]:
        """Validate a decoded payload, returning the readings and the dropped count."""
        if not isinstance(payload, list):
            raise FetchError(
                "invalid_shape",
                f"Expected a JSON array, got {type(payload).__name__}.",
            )

        readings: List[Reading] = []
        dropped = 0
        for index, item in enumerate(payload):
            if not isinstance(item, dict):
                reason = f"expected an object, got {type(item).__name__}"
            else:
                try:
                    readings.append(ReadingPayload.model_validate(item).to_reading())
                    continue
                except ValidationError as exc:
                    reason = _describe_validation_error(exc)

            if self.strict:
                raise FetchError("invalid_record", f"Record {index} is invalid: {reason}")
            dropped += 1
            logger.warning(
                "Dropping malformed record",
                extra={"record_index": index, "reason": reason},
            )

        return readings, dropped
