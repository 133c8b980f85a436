"""
HTTP client for the polycode backend.

Same interface as ``CompletionProxy`` (``translate`` / ``explain``) so the
orchestrator can talk to either. Errors are mapped onto the taxonomy:

- backend unreachable         → TransportError
- any other request failure   → ProviderError (502)
- non-2xx from the backend    → ProviderError (status and message mirrored)
- 2xx without a usable field  → MalformedResponseError
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from polycode.core.errors import MalformedResponseError, ProviderError, TransportError
from polycode.core.models import ConvertResponse, ExplainResponse

logger = logging.getLogger(__name__)


class BackendClient:
    """
    Talks to ``POST /convert`` and ``POST /explain``.

    No timeout is applied: in-flight requests run until the backend answers.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._http_client = http_client

    async def translate(self, source_code: str, target_language: str) -> str:
        data = await self._post(
            "/convert",
            {"sourceCode": source_code, "targetLanguage": target_language},
            ConvertResponse,
        )
        return data.output

    async def explain(self, code: str, language: str | None = None) -> str:
        data = await self._post(
            "/explain",
            {"code": code, "language": language},
            ExplainResponse,
        )
        return data.explanation

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Lazy-load the HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=None)
        return self._http_client

    async def _post(self, path: str, body: dict[str, Any], schema: type[BaseModel]) -> Any:
        try:
            response = await self.http_client.post(f"{self.base_url}{path}", json=body)
        except httpx.TransportError as e:
            logger.error(f"Backend unreachable at {self.base_url}: {e}")
            raise TransportError(f"Unable to connect to {self.base_url}") from e
        except httpx.RequestError as e:
            logger.error(f"Request to {self.base_url}{path} failed: {e}")
            raise ProviderError(f"Request failed: {e}", status_code=502) from e

        if not response.is_success:
            raise ProviderError(
                _error_message(response),
                status_code=response.status_code,
                details=_error_details(response),
            )

        try:
            return schema.model_validate_json(response.content)
        except SchemaError as e:
            logger.error(f"Invalid response from {path}: {response.text[:200]}")
            raise MalformedResponseError("Invalid response from server") from e


def _json_body(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _error_message(response: httpx.Response) -> str:
    error = _json_body(response).get("error")
    return error if isinstance(error, str) and error else f"Server error: {response.status_code}"


def _error_details(response: httpx.Response) -> str | None:
    details = _json_body(response).get("details")
    return details if isinstance(details, str) else None
