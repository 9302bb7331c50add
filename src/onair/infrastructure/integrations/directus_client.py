"""Directus REST client (generic item store).

Hey future me - we use Directus as a dumb item store, nothing collection-specific lives here!
The whole contract we depend on:

    GET   /items/{collection}?filter[f][_eq]=v&sort=-f&limit=n&fields=a,b
    POST  /items/{collection}            -> {"data": {...created row...}}
    PATCH /items/{collection}/{id}       -> {"data": {...}}
    POST  /files (multipart)             -> {"data": {"id": "<uuid>", ...}}
    GET   /assets/{file_id}?width=&height=&fit=&quality=   (public image URL)

Auth is a static bearer token (DIRECTUS_TOKEN). Every failure - no URL configured,
transport, timeout, 4xx/5xx, non-JSON body - becomes StoreUnavailableError so callers have
ONE thing to catch.
"""

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import urlencode

import httpx

from onair.config.settings import DirectusSettings
from onair.domain.exceptions import StoreUnavailableError
from onair.infrastructure.integrations.http_pool import HttpClientPool

logger = logging.getLogger(__name__)


def _filter_value(value: Any) -> Any:
    if isinstance(value, list | tuple | set | frozenset):
        return {"_in": [str(v) for v in value]}
    if isinstance(value, bool):
        return {"_eq": value}
    return {"_eq": str(value)}


def build_query(
    filters: Mapping[str, Any] | None = None,
    sort: Sequence[str] | None = None,
    limit: int | None = None,
    fields: Sequence[str] | None = None,
) -> list[tuple[str, str]]:
    """Render Directus query parameters.

    Equality filters: {"track_key": "x"} -> filter[track_key][_eq]=x
    Membership for sequences: {"track_key": ["x", "y"]} -> filter={"track_key":{"_in":["x","y"]}}

    Hey future me - the bracket form of _in is split on commas by Directus, and track keys
    DO contain commas ("crosby, stills & nash - ..."). Any membership filter switches the whole
    filter to the JSON form, which carries each key intact.
    """
    params: list[tuple[str, str]] = []
    filters = filters or {}
    if any(isinstance(v, list | tuple | set | frozenset) for v in filters.values()):
        rendered = {name: _filter_value(value) for name, value in filters.items()}
        encoded = json.dumps(rendered, separators=(",", ":"), ensure_ascii=False)
        params.append(("filter", encoded))
    else:
        for name, value in filters.items():
            if isinstance(value, bool):
                value = "true" if value else "false"
            params.append((f"filter[{name}][_eq]", str(value)))
    if sort:
        params.append(("sort", ",".join(sort)))
    if limit is not None:
        params.append(("limit", str(limit)))
    if fields:
        params.append(("fields", ",".join(fields)))
    return params


class DirectusClient:
    """Thin async wrapper around the Directus items/files/assets endpoints."""

    def __init__(
        self,
        settings: DirectusSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self._client = client

    @property
    def base_url(self) -> str:
        return self.settings.url

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client
        return await HttpClientPool.get_client()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.settings.token:
            headers["Authorization"] = f"Bearer {self.settings.token}"
        return headers

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path if path.startswith('/') else '/' + path}"

    # Yo, THE single choke point for store I/O. Directus error bodies look like
    # {"errors": [{"message": "...", "extensions": {"code": "FORBIDDEN"}}]} - we pull the first
    # message into the exception so logs say "FORBIDDEN: You don't have permission" instead of
    # a bare 403.
    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: list[tuple[str, str]] | None = None,
        json: Any = None,
        files: Any = None,
    ) -> Any:
        # No store configured = store down. The orchestrator degrades, it does not 500.
        if not self.settings.is_configured:
            raise StoreUnavailableError("DIRECTUS_URL is not set")

        client = await self._get_client()
        try:
            response = await client.request(
                method,
                self._url(path),
                params=params,
                json=json,
                files=files,
                headers=self._headers(),
                timeout=self.settings.timeout_seconds,
            )
        except httpx.TimeoutException as e:
            raise StoreUnavailableError(
                f"Directus {method} {path} timed out"
            ) from e
        except httpx.HTTPError as e:
            raise StoreUnavailableError(f"Directus {method} {path} failed: {e}") from e

        if response.status_code >= 400:
            raise StoreUnavailableError(
                f"Directus {method} {path} -> {response.status_code}: "
                f"{self._error_message(response)}",
                http_status=response.status_code,
            )

        if response.status_code == 204 or not response.content:
            return None

        try:
            body = response.json()
        except ValueError as e:
            raise StoreUnavailableError(
                f"Directus {method} {path} returned non-JSON body"
            ) from e

        return body.get("data") if isinstance(body, dict) else None

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            errors = response.json().get("errors") or []
            first = errors[0]
            code = (first.get("extensions") or {}).get("code")
            message = first.get("message", "")
            return f"{code}: {message}" if code else message
        except (ValueError, AttributeError, IndexError, TypeError):
            return response.text[:200]

    async def list_items(
        self,
        collection: str,
        *,
        filters: Mapping[str, Any] | None = None,
        sort: Sequence[str] | None = None,
        limit: int | None = None,
        fields: Sequence[str] | None = None,
    ) -> list[dict[str, Any]]:
        """Query a collection.

        Returns:
            Rows (possibly empty)

        Raises:
            StoreUnavailableError: On any failure
        """
        data = await self._request(
            "GET",
            f"/items/{collection}",
            params=build_query(filters, sort, limit, fields),
        )
        return [row for row in data or [] if isinstance(row, dict)]

    async def create_item(
        self, collection: str, payload: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Create one row and return it as stored."""
        data = await self._request("POST", f"/items/{collection}", json=dict(payload))
        return data if isinstance(data, dict) else dict(payload)

    async def update_item(
        self, collection: str, item_id: str | int, payload: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        """Partially update one row."""
        data = await self._request(
            "PATCH", f"/items/{collection}/{item_id}", json=dict(payload)
        )
        return data if isinstance(data, dict) else None

    async def upload_file(
        self, filename: str, content: bytes, content_type: str = "image/jpeg"
    ) -> str:
        """Upload a binary file.

        Returns:
            The new file id (usable with asset_url())
        """
        data = await self._request(
            "POST", "/files", files={"file": (filename, content, content_type)}
        )
        file_id = data.get("id") if isinstance(data, dict) else None
        if not file_id:
            raise StoreUnavailableError("Directus file upload returned no id")
        logger.debug("Uploaded %s to Directus as %s", filename, file_id)
        return str(file_id)

    def asset_url(
        self,
        file_id: str | None,
        width: int | None = None,
        height: int | None = None,
        fit: str | None = None,
        quality: int | None = None,
    ) -> str:
        """Absolute public URL for a stored file, "" when no id or no base URL."""
        if not file_id or not self.base_url:
            return ""

        params = {
            key: str(value)
            for key, value in (
                ("width", width),
                ("height", height),
                ("fit", fit),
                ("quality", quality),
            )
            if value
        }
        query = f"?{urlencode(params)}" if params else ""
        return f"{self.base_url}/assets/{file_id}{query}"
