# Path: core/client/backend.py
# Purpose: HTTP client for the image search backend.
# Layer: core/client.
# Details: Wraps requests.Session, parses payloads into domain models, and translates transport errors.

from __future__ import annotations

import logging
from contextlib import ExitStack
from typing import Any, Iterable, List, Optional, Tuple
from urllib.parse import quote

import requests

from config.settings import BackendSettings
from core.errors import BackendConnectionError, BackendResponseError, DeleteFailure, UploadFailure
from core.models.domain import BrowsePage, ImageRef, SearchResult, SpatialPoint, StorageInfo, UploadItem

logger = logging.getLogger(__name__)


class BackendClient:
    """Thin typed wrapper over the backend endpoints.

    Every method either returns parsed domain objects or raises an
    ``ImaceError`` subclass; ``requests`` exceptions never leak to callers.
    """

    def __init__(self, settings: Optional[BackendSettings] = None, session: Optional[requests.Session] = None) -> None:
        self.settings = settings or BackendSettings()
        self.base_url = self.settings.base_url.rstrip("/")
        self.session = session or requests.Session()

    def image_url(self, ref: ImageRef) -> str:
        """Return the display URL for a stored image."""

        return f"{self.base_url}/image/{quote(ref, safe='')}"

    def paginated_images(self, page: int, page_size: int) -> BrowsePage:
        payload = self._get_json("/paginated_images", params={"page": page, "page_size": page_size})
        if not isinstance(payload, dict) or "images" not in payload:
            raise BackendResponseError("paginated_images response is missing 'images'")
        images = tuple(str(ref) for ref in payload.get("images") or ())
        return BrowsePage(images=images, total=int(payload.get("total", len(images))))

    def list_images(self) -> Tuple[ImageRef, ...]:
        payload = self._get_json("/images")
        if isinstance(payload, dict):
            payload = payload.get("images") or []
        return tuple(str(ref) for ref in payload)

    def search(self, query: str) -> Tuple[SearchResult, ...]:
        payload = self._get_json("/search", params={"query": query})
        if isinstance(payload, dict):
            payload = payload.get("results") or []
        try:
            return tuple(SearchResult.from_payload(item) for item in payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise BackendResponseError(f"Malformed search result: {exc}") from exc

    def image_points(self) -> Tuple[SpatialPoint, ...]:
        payload = self._get_json("/image_points")
        if isinstance(payload, dict):
            payload = payload.get("points") or []
        try:
            return tuple(SpatialPoint.from_payload(item) for item in payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise BackendResponseError(f"Malformed image point: {exc}") from exc

    def storage_size(self) -> StorageInfo:
        payload = self._get_json("/storage_size")
        try:
            return StorageInfo(size_bytes=int(payload["size_bytes"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise BackendResponseError(f"Malformed storage size: {exc}") from exc

    def fetch_image(self, ref: ImageRef) -> bytes:
        response = self._request("GET", self.image_url(ref))
        self._raise_for_status(response, f"image {ref!r}")
        return response.content

    def upload(self, items: Iterable[UploadItem]) -> None:
        """Send every item as one multipart request; any failure fails the whole batch."""

        items = list(items)
        with ExitStack() as stack:
            try:
                files: List[Tuple[str, Tuple[str, Any]]] = [
                    ("files", (item.name, stack.enter_context(item.path.open("rb")))) for item in items
                ]
            except OSError as exc:
                raise UploadFailure(f"Cannot read staged file: {exc}") from exc
            try:
                response = self._request("POST", f"{self.base_url}/upload", files=files)
            except (BackendConnectionError, BackendResponseError) as exc:
                raise UploadFailure(str(exc)) from exc
        if not response.ok:
            raise UploadFailure(f"Upload rejected with HTTP {response.status_code}: {response.text[:200]}")
        logger.info("Backend accepted %d file(s)", len(items))

    def delete_all(self) -> None:
        try:
            response = self._request("POST", f"{self.base_url}/delete_all")
        except (BackendConnectionError, BackendResponseError) as exc:
            raise DeleteFailure(str(exc)) from exc
        if not response.ok:
            raise DeleteFailure(f"Delete rejected with HTTP {response.status_code}: {response.text[:200]}")
        logger.warning("Backend deleted all stored images")

    def close(self) -> None:
        self.session.close()

    def _get_json(self, path: str, params: Optional[dict] = None) -> Any:
        response = self._request("GET", f"{self.base_url}{path}", params=params)
        self._raise_for_status(response, path)
        try:
            return response.json()
        except ValueError as exc:
            raise BackendResponseError(f"{path} returned invalid JSON") from exc

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        logger.debug("%s %s %s", method, url, kwargs.get("params") or "")
        try:
            return self.session.request(method, url, timeout=self.settings.request_timeout, **kwargs)
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise BackendConnectionError(f"Cannot reach backend at {self.base_url}: {exc}") from exc
        except requests.RequestException as exc:
            raise BackendResponseError(f"{method} {url} failed: {exc}") from exc

    @staticmethod
    def _raise_for_status(response: requests.Response, what: str) -> None:
        if not response.ok:
            raise BackendResponseError(f"{what} returned HTTP {response.status_code}", status_code=response.status_code)
