"""HTTP client for the suggestion poll endpoint."""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from notfound_suggestions_client.models import PollResponse


class SuggestionPollClientError(RuntimeError):
    """Raised when a poll request produced no usable answer."""


class SuggestionPollClient:
    """Small wrapper around `POST /suggestions/poll`.

    Every answer whose body carries a poll status is returned as a response,
    whatever its HTTP status. Transport failures and 429 answers raise, as do
    bodies without a status.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        clean_base = base_url.strip().rstrip("/")
        if not clean_base:
            raise SuggestionPollClientError("Service URL cannot be empty.")
        self._poll_endpoint = f"{clean_base}/suggestions/poll"
        self._http = httpx.AsyncClient(timeout=timeout_seconds, transport=transport)

    async def close(self) -> None:
        """Release underlying HTTP resources."""

        await self._http.aclose()

    async def __aenter__(self) -> SuggestionPollClient:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    async def poll(self, url: str, nonce: str | None = None) -> PollResponse:
        """Call `/suggestions/poll` once."""

        body: dict[str, Any] = {"url": url}
        if nonce is not None:
            body["nonce"] = nonce

        try:
            response = await self._http.post(self._poll_endpoint, json=body)
        except httpx.HTTPError as exc:
            raise SuggestionPollClientError(f"POST {self._poll_endpoint} failed: {exc}") from exc

        if response.status_code == 429:
            raise SuggestionPollClientError(f"POST {self._poll_endpoint} was rate limited.")

        try:
            payload = response.json()
        except ValueError as exc:
            raise SuggestionPollClientError(
                f"POST {self._poll_endpoint} returned invalid JSON ({response.status_code})."
            ) from exc

        try:
            parsed = PollResponse.model_validate(payload)
        except ValidationError as exc:
            raise SuggestionPollClientError(
                f"POST {self._poll_endpoint} returned no poll status ({response.status_code})."
            ) from exc

        return parsed


__all__ = ["SuggestionPollClient", "SuggestionPollClientError"]
