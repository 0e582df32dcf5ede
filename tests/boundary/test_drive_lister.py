"""
Test suite for GoogleDriveLister.

Uses a mocked requests session: listing pages and image downloads are
scripted per URL.

System role: Verification of Drive folder listing and batch download
"""

from unittest.mock import MagicMock

import pytest
import requests

from facescan.boundary.drive.drive_lister import GoogleDriveLister
from facescan.configs.drive import DriveSettings
from facescan.core.exceptions import CollectionFetchError

FOLDER_URL = "https://drive.google.com/drive/folders/folder-abc"


def page(files, next_token=None):
    response = MagicMock()
    response.ok = True
    response.status_code = 200
    data = {"files": files}
    if next_token:
        data["nextPageToken"] = next_token
    response.json.return_value = data
    return response


def image_response(content=b"jpeg", status=200):
    response = MagicMock()
    response.content = content
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} Error")
    return response


def file(file_id, mime="image/jpeg"):
    return {"id": file_id, "name": f"{file_id}.jpg", "mimeType": mime}


@pytest.fixture
def settings() -> DriveSettings:
    """Provide Drive settings without environment overrides."""
    return DriveSettings(api_key="test-key", page_delay_seconds=0.5, max_download_workers=2)


class TestScan:
    """Test scan()."""

    def test_counts_images_across_pages(self, settings):
        # Arrange
        session = MagicMock()
        session.get.side_effect = [
            page([file("a"), file("doc", mime="application/pdf")], next_token="p2"),
            page([file("b", mime="image/png")]),
        ]
        sleeps = []
        lister = GoogleDriveLister(settings, session=session, sleep=sleeps.append)

        # Act
        count = lister.scan(FOLDER_URL)

        # Assert
        assert count == 2
        assert sleeps == [0.5]
        first_params = session.get.call_args_list[0].kwargs["params"]
        second_params = session.get.call_args_list[1].kwargs["params"]
        assert first_params["q"] == "'folder-abc' in parents and trashed=false"
        assert first_params["key"] == "test-key"
        assert "pageToken" not in first_params
        assert second_params["pageToken"] == "p2"

    def test_api_error_raises(self, settings):
        response = MagicMock()
        response.ok = False
        response.status_code = 403
        response.json.return_value = {"error": {"message": "API key not valid"}}
        session = MagicMock()
        session.get.return_value = response
        lister = GoogleDriveLister(settings, session=session)

        with pytest.raises(CollectionFetchError, match="API key not valid"):
            lister.scan(FOLDER_URL)

    def test_network_error_raises(self, settings):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("dns failure")
        lister = GoogleDriveLister(settings, session=session)

        with pytest.raises(CollectionFetchError):
            lister.scan(FOLDER_URL)


class TestSlice:
    """Test slice()."""

    @pytest.fixture
    def lister(self, settings):
        """Provide a lister over a three image folder."""
        session = MagicMock()
        listing = page([file("a"), file("b"), file("c")])

        def get(url, params=None, timeout=None):
            if params is not None:
                return listing
            if "/d/b=" in url:
                return image_response(status=404)
            return image_response(content=url.encode())

        session.get.side_effect = get
        return GoogleDriveLister(settings, session=session)

    def test_returns_items_with_positions_and_links(self, lister):
        # Act
        items = lister.slice(FOLDER_URL, 0, 2)

        # Assert
        assert [(i.item_id, i.index) for i in items] == [("a", 0), ("b", 1)]
        assert items[0].content == b"https://lh3.googleusercontent.com/d/a=s1000"
        assert items[0].source_url == "https://lh3.googleusercontent.com/d/a=s1000"
        assert items[0].view_url == "https://drive.google.com/file/d/a/view"
        assert items[0].name == "a.jpg"

    def test_download_failure_reported_per_item(self, lister):
        items = lister.slice(FOLDER_URL, 1, 2)

        assert items[0].item_id == "b"
        assert items[0].content is None
        assert "Failed to download image" in items[0].error
        assert items[1].error is None

    def test_fewer_items_near_end(self, lister):
        items = lister.slice(FOLDER_URL, 2, 10)

        assert [i.item_id for i in items] == ["c"]
        assert items[0].index == 2

    def test_empty_past_end(self, lister):
        assert lister.slice(FOLDER_URL, 3, 2) == []

    def test_listing_cached_between_slices(self, lister):
        lister.slice(FOLDER_URL, 0, 1)
        lister.slice(FOLDER_URL, 2, 1)

        listing_calls = [c for c in lister._session.get.call_args_list if c.kwargs.get("params")]
        assert len(listing_calls) == 1

    def test_file_without_id_uses_position(self, settings):
        session = MagicMock()
        session.get.return_value = page([{"name": "orphan.jpg", "mimeType": "image/jpeg"}])
        lister = GoogleDriveLister(settings, session=session)

        (item,) = lister.slice(FOLDER_URL, 0, 1)

        assert item.item_id == "1"
        assert item.error == "File has no id"
        assert session.get.call_count == 1

    def test_listing_cache_evicts_least_recent_folder(self, settings):
        # Arrange
        session = MagicMock()
        session.get.return_value = page([{"name": "orphan.jpg", "mimeType": "image/jpeg"}])
        lister = GoogleDriveLister(
            settings.model_copy(update={"listing_cache_size": 2}), session=session
        )
        folders = [f"https://drive.google.com/drive/folders/folder-{n}" for n in range(3)]

        # Act
        lister.slice(folders[0], 0, 1)
        lister.slice(folders[1], 0, 1)
        lister.slice(folders[0], 0, 1)
        lister.slice(folders[2], 0, 1)
        calls_before = session.get.call_count
        lister.slice(folders[0], 0, 1)
        cached_call_count = session.get.call_count
        lister.slice(folders[1], 0, 1)

        # Assert
        assert calls_before == 3
        assert cached_call_count == 3
        assert session.get.call_count == 4
        assert list(lister._listings) == [folders[0], folders[1]]
