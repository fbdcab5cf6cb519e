"""Tests for domain models."""

import pytest

from ytm_proxy.domain.models import Track


class TestTrackFromApi:
    def test_search_result(self) -> None:
        item = {
            "videoId": "dQw4w9WgXcQ",
            "title": "Never Gonna Give You Up",
            "artists": [{"name": "Rick Astley", "id": "UC1"}, {"name": "Other"}],
            "album": {"name": "Whenever You Need Somebody", "id": "MPRE1"},
            "duration": "3:33",
            "thumbnails": [
                {"url": "https://img/small.jpg", "width": 60},
                {"url": "https://img/large.jpg", "width": 544},
            ],
        }

        track = Track.from_api(item)

        assert track == Track(
            id="dQw4w9WgXcQ",
            title="Never Gonna Give You Up",
            artist="Rick Astley",
            album="Whenever You Need Somebody",
            duration="3:33",
            thumbnail="https://img/large.jpg",
        )

    def test_minimal_item(self) -> None:
        track = Track.from_api({"videoId": "abc", "album": None, "artists": None})
        assert track == Track(id="abc", title="Unknown Title")

    def test_missing_id_raises(self) -> None:
        with pytest.raises(ValueError):
            Track.from_api({"title": "No ID"})

    def test_to_dict(self) -> None:
        track = Track(id="abc", title="Song")
        assert track.to_dict() == {
            "id": "abc",
            "title": "Song",
            "artist": "",
            "album": "",
            "duration": "",
            "thumbnail": None,
        }
