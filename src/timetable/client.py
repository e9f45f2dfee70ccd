"""HTTP implementation of TimetableStore against the timetable REST API.

The API wraps every body as ``{"success": bool, "data": ..., "error": ...}``.
This client never raises for HTTP or transport failures: they come back as a
failure ``ApiResponse`` so the editor can decide what to do with them.

Blocking ``requests`` calls run in a worker thread so an editing session can
stay on a single event loop. Only idempotent reads are retried.
"""

import asyncio
from typing import Any
from uuid import uuid4

import requests
from pydantic import ValidationError
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.timetable.config import get_config
from src.timetable.errors import (
    PermanentError,
    RateLimitError,
    TransientError,
    TransportError,
)
from src.timetable.logging import get_logger
from src.timetable.models import ApiResponse, TimeSlot, TimeSlotCreate, TimetableItem
from src.timetable.sanitize import deep_sanitize

logger = get_logger(__name__)

TIME_SLOTS_PATH = "/api/time-slots"
TIMETABLE_ITEMS_PATH = "/api/timetable-items"

# Status codes that are worth another attempt on a read
_RETRYABLE_STATUS: frozenset[int] = frozenset({500, 502, 503, 504})


def item_path(item_id: str) -> str:
    return f"{TIMETABLE_ITEMS_PATH}/{item_id}"


def items_by_timetable_path(timetable_id: str) -> str:
    return f"{TIMETABLE_ITEMS_PATH}/timetable/{timetable_id}"


class TimetableApiClient:
    """TimetableStore backed by the Cloud Functions REST API."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        retry_attempts: int | None = None,
        retry_wait: float = 0.5,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: API root, e.g. "https://region-project.cloudfunctions.net".
                Defaults to TIMETABLE_API_BASE_URL.
            token: Bearer token. Defaults to TIMETABLE_API_TOKEN.
            timeout: Per-request timeout in seconds.
            retry_attempts: Attempts for reads on transient failures.
            retry_wait: Base of the exponential backoff between read attempts.
            session: Pre-built requests session (tests inject a fake one).
        """
        config = get_config()
        self.base_url = (base_url or config.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.request_timeout_seconds
        self.retry_attempts = retry_attempts or config.read_retry_attempts
        self.retry_wait = retry_wait
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        token = token if token is not None else config.api_token
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})

        logger.debug(
            "api_client_initialized",
            base_url=self.base_url,
            timeout=self.timeout,
            retry_attempts=self.retry_attempts,
        )

    def close(self) -> None:
        self.session.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _send(self, method: str, path: str, body: Any = None) -> dict[str, Any]:
        """Issue one request and return the decoded envelope.

        Raises:
            TransientError: Timeout, connection failure or 5xx response.
            RateLimitError: 429 response.
            PermanentError: Any other non-2xx or a ``success: false`` body.
        """
        request_id = f"req_{uuid4().hex[:12]}"
        try:
            resp = self.session.request(
                method,
                f"{self.base_url}{path}",
                json=deep_sanitize(body) if body is not None else None,
                headers={"x-request-id": request_id},
                timeout=self.timeout,
            )
        except (requests.Timeout, requests.ConnectionError) as e:
            raise TransientError(f"Request to {path} failed: {e}") from e
        except requests.RequestException as e:
            raise PermanentError(f"Request to {path} failed: {e}") from e

        logger.debug(
            "api_response",
            method=method,
            path=path,
            status=resp.status_code,
            request_id=request_id,
        )

        if resp.status_code == 204:
            return {"success": True}

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        message = data.get("error") or data.get("message") or f"HTTP {resp.status_code}"
        if resp.status_code == 429:
            raise RateLimitError(message)
        if resp.status_code in _RETRYABLE_STATUS:
            raise TransientError(message)
        if not 200 <= resp.status_code < 300 or not data.get("success", False):
            raise PermanentError(message)
        return data

    def _send_read(self, path: str) -> dict[str, Any]:
        retrying = Retrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=self.retry_wait, max=10),
            retry=retry_if_exception_type(TransientError),
            reraise=True,
        )
        return retrying(self._send, "GET", path)

    async def _request(
        self, method: str, path: str, body: Any = None
    ) -> ApiResponse[Any]:
        try:
            if method == "GET":
                data = await asyncio.to_thread(self._send_read, path)
            else:
                data = await asyncio.to_thread(self._send, method, path, body)
        except TransportError as e:
            logger.warning(
                "api_request_failed",
                method=method,
                path=path,
                error=str(e),
                type=type(e).__name__,
            )
            return ApiResponse.fail(str(e))
        return ApiResponse(success=True, data=data.get("data"), message=data.get("message"))

    @staticmethod
    def _parse(response: ApiResponse[Any], parse) -> ApiResponse[Any]:
        """Validate the data of a successful response into models."""
        if not response.success:
            return response
        try:
            return ApiResponse(success=True, data=parse(response.data), message=response.message)
        except ValidationError as e:
            logger.warning("api_response_malformed", error=str(e))
            return ApiResponse.fail(f"Malformed response from storage API: {e.error_count()} errors")

    # ------------------------------------------------------------------
    # TimetableStore
    # ------------------------------------------------------------------
    async def get_all_time_slots(self) -> ApiResponse[list[TimeSlot]]:
        response = await self._request("GET", TIME_SLOTS_PATH)
        return self._parse(
            response, lambda data: [TimeSlot.model_validate(s) for s in data or []]
        )

    async def create_time_slot(self, fields: TimeSlotCreate) -> ApiResponse[TimeSlot]:
        response = await self._request("POST", TIME_SLOTS_PATH, fields.to_wire())
        return self._parse(response, TimeSlot.model_validate)

    async def get_timetable_items(
        self, timetable_id: str
    ) -> ApiResponse[list[TimetableItem]]:
        response = await self._request("GET", items_by_timetable_path(timetable_id))
        return self._parse(
            response, lambda data: [TimetableItem.model_validate(i) for i in data or []]
        )

    async def create_timetable_item(
        self, payload: dict[str, Any]
    ) -> ApiResponse[TimetableItem]:
        response = await self._request("POST", TIMETABLE_ITEMS_PATH, payload)
        return self._parse(response, TimetableItem.model_validate)

    async def update_timetable_item(
        self, item_id: str, fields: dict[str, Any]
    ) -> ApiResponse[TimetableItem]:
        response = await self._request("PUT", item_path(item_id), fields)
        return self._parse(response, TimetableItem.model_validate)

    async def delete_timetable_item(self, item_id: str) -> ApiResponse[None]:
        return await self._request("DELETE", item_path(item_id))
