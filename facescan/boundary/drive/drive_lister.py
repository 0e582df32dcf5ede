"""
Google Drive folder lister.

Lists the images of a public Drive folder through the Drive v3 API and
downloads resized copies for comparison. The listing is cached per folder
so slices taken by the same process do not relist the folder.

Dependencies: requests
System role: CollectionLister implementation for the batch orchestrator
"""

import logging
import threading
import time
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable

import requests

from facescan.boundary.drive.folder_url import parse_folder_id
from facescan.configs.drive import DriveSettings
from facescan.core.batch.models import RemoteItem
from facescan.core.exceptions import CollectionFetchError

logger = logging.getLogger(__name__)


class GoogleDriveLister:
    """CollectionLister over public Google Drive folders."""

    def __init__(
        self,
        settings: DriveSettings | None = None,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize Drive lister.

        Args:
            settings: Drive API configuration (defaults from environment)
            session: HTTP session (tests inject a mock)
            sleep: Pause function used between listing pages
        """
        self._settings = settings or DriveSettings()
        self._session = session or requests.Session()
        self._sleep = sleep
        self._listings: OrderedDict[str, list[dict[str, Any]]] = OrderedDict()
        self._lock = threading.Lock()

    def scan(self, source_uri: str) -> int:
        """
        List the folder and return its image count.

        Always relists so a rescan picks up added or removed files.

        Raises:
            ValidationError: URL is not a Drive folder link
            CollectionFetchError: Drive API request failed
        """
        files = self._list_folder(source_uri)
        self._remember(source_uri, files)
        logger.info(
            "scan - Folder listed",
            extra={"source_uri": source_uri, "image_count": len(files)},
        )
        return len(files)

    def slice(self, source_uri: str, start: int, count: int) -> list[RemoteItem]:
        """
        Download items [start, start+count) of the folder listing.

        Download failures are reported per item through RemoteItem.error.

        Raises:
            CollectionFetchError: Folder could not be listed
        """
        files = self._files(source_uri)
        batch = files[start : start + count]
        if not batch:
            return []

        workers = min(self._settings.max_download_workers, len(batch))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(
                pool.map(
                    lambda pair: self._download(pair[1], start + pair[0]),
                    enumerate(batch),
                )
            )

    def _files(self, source_uri: str) -> list[dict[str, Any]]:
        with self._lock:
            cached = self._listings.get(source_uri)
            if cached is not None:
                self._listings.move_to_end(source_uri)
                return cached
        files = self._list_folder(source_uri)
        self._remember(source_uri, files)
        return files

    def _remember(self, source_uri: str, files: list[dict[str, Any]]) -> None:
        # Least recently used folders are evicted past the cache size
        with self._lock:
            self._listings[source_uri] = files
            self._listings.move_to_end(source_uri)
            while len(self._listings) > self._settings.listing_cache_size:
                self._listings.popitem(last=False)

    def _list_folder(self, source_uri: str) -> list[dict[str, Any]]:
        folder_id = parse_folder_id(source_uri)
        files: list[dict[str, Any]] = []
        page_token: str | None = None
        page = 0

        while True:
            params = {
                "q": f"'{folder_id}' in parents and trashed=false",
                "pageSize": self._settings.page_size,
                "fields": "nextPageToken, files(id, name, mimeType)",
                "orderBy": "name",
                "key": self._settings.api_key,
            }
            if page_token:
                params["pageToken"] = page_token

            data = self._get_page(source_uri, params)
            page += 1
            images = [
                f for f in data.get("files", []) if str(f.get("mimeType", "")).startswith("image/")
            ]
            files.extend(images)
            logger.debug(
                "_list_folder - Page fetched",
                extra={"page": page, "images": len(images), "total": len(files)},
            )

            page_token = data.get("nextPageToken")
            if not page_token:
                return files
            self._sleep(self._settings.page_delay_seconds)

    def _get_page(self, source_uri: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._session.get(
                self._settings.api_url, params=params, timeout=self._settings.request_timeout
            )
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise CollectionFetchError(f"Failed to list Google Drive folder: {e}", source_uri) from e

        if "error" in data:
            message = data["error"].get("message", "Unknown error")
            raise CollectionFetchError(f"Google Drive API error: {message}", source_uri)
        if not response.ok:
            raise CollectionFetchError(
                f"Google Drive API returned HTTP {response.status_code}", source_uri
            )
        return data

    def _download(self, file: dict[str, Any], index: int) -> RemoteItem:
        file_id = file.get("id")
        if not file_id:
            # No native id: fall back to the 1-based position
            return RemoteItem(
                item_id=str(index + 1),
                index=index,
                name=file.get("name"),
                error="File has no id",
            )
        source_url = self._settings.image_url_template.format(
            file_id=file_id, size=self._settings.image_size
        )
        item = RemoteItem(
            item_id=file_id,
            index=index,
            name=file.get("name"),
            source_url=source_url,
            view_url=self._settings.view_url_template.format(file_id=file_id),
        )
        try:
            response = self._session.get(source_url, timeout=self._settings.request_timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(
                "_download - Image download failed: %s", e, extra={"file_id": file_id}
            )
            return item.model_copy(update={"error": f"Failed to download image: {e}"})
        return item.model_copy(update={"content": response.content})
