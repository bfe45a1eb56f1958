"""Tests for the LocalLibrary entry point."""

import pytest

from euterpe.library.config import LibraryConfig, ScanConfig
from euterpe.library.errors import LibraryError, MetadataExtractionError
from euterpe.library.library import LocalLibrary, default_database_path
from euterpe.library.models import BrowseArgs


@pytest.fixture
def library(tmp_path, music_root, extractor, fast_scan_config):
    library = LocalLibrary(
        tmp_path / "library.db",
        [music_root],
        scan_config=fast_scan_config,
        watch=False,
        extractor=extractor,
    )
    library.initialize()
    yield library
    library.close()


class TestLocalLibrary:
    """Test the library facade end to end."""

    def test_scan_then_search(self, library, music_root, make_track):
        make_track(music_root / "tests" / "1.mp3", "Tester", "Album Of Tests", "One", 1)
        make_track(music_root / "tests" / "2.mp3", "Tester", "Album Of Tests", "Two", 2)

        report = library.scan()

        assert report.files_cataloged == 2
        assert [r.title for r in library.search("album of tests")] == ["One", "Two"]
        assert library.search("Not There") == []

    def test_add_media(self, library, music_root, make_track):
        path = make_track(music_root / "single" / "song.mp3", "Solo", "Single", "Song")

        track_id = library.add_media(path)

        assert library.get_track(track_id).title == "Song"
        assert library.get_file_path(track_id) == str(path)
        assert library.add_media(path) == track_id

    def test_add_media_rejects_unsupported(self, library, music_root):
        path = music_root / "notes.txt"
        path.write_text("x")

        with pytest.raises(LibraryError):
            library.add_media(path)

    def test_add_media_reports_unreadable(self, library, music_root):
        path = music_root / "bad.mp3"
        path.write_text("broken")

        with pytest.raises(MetadataExtractionError):
            library.add_media(path)

    def test_browse_and_album_files(self, library, music_root, make_track):
        make_track(music_root / "b" / "2.mp3", "X", "Bravo", "Second", 2)
        make_track(music_root / "b" / "1.mp3", "X", "Bravo", "First", 1)
        make_track(music_root / "a" / "1.mp3", "Y", "Alpha", "Only", 1)
        library.scan()

        albums = library.browse_albums(BrowseArgs(order_by='name'))
        assert [album.name for album in albums.items] == ["Alpha", "Bravo"]

        bravo = albums.items[1]
        assert [t.title for t in library.get_album_files(bravo.id)] == ["First", "Second"]
        assert library.get_album(bravo.id).fs_path == str(music_root / "b")

        artists = library.browse_artists()
        assert [artist.name for artist in artists.items] == ["X", "Y"]
        assert library.get_artist(artists.items[0].id).name == "X"

    def test_truncate(self, library, music_root, make_track):
        make_track(music_root / "a" / "1.mp3", "Y", "Alpha", "Only", 1)
        library.scan()

        library.truncate()

        assert library.search("only") == []

    def test_wait_scan_when_idle(self, library):
        assert library.wait_scan(timeout=1) is True

    def test_scan_in_background(self, library, music_root, make_track):
        make_track(music_root / "a" / "1.mp3", "Y", "Alpha", "Only", 1)

        library.scan_in_background().join(5)

        assert library.wait_scan(timeout=5)
        assert [r.title for r in library.search("alpha")] == ["Only"]


class TestFromConfig:

    def test_from_config(self, tmp_path, music_root, extractor):
        config = LibraryConfig(
            paths=[str(music_root)],
            database_path=str(tmp_path / "db" / "catalog.db"),
            scan=ScanConfig(initial_wait=0),
            fast_scan=True,
            watch=False,
        )

        with LocalLibrary.from_config(config, extractor=extractor) as library:
            assert library.paths == [str(music_root)]
            assert library.scanner.fast_scan is True
            assert library.scanner.watch_enabled is False

        assert (tmp_path / "db" / "catalog.db").exists()

    def test_default_database_path(self):
        path = default_database_path()

        assert path.name == "library.db"
        assert "euterpe-library" in str(path)

    def test_memory_database(self, music_root, make_track, extractor, fast_scan_config):
        make_track(music_root / "a" / "1.mp3", "Y", "Alpha", "Only", 1)

        with LocalLibrary(":memory:", [music_root], scan_config=fast_scan_config,
                          watch=False, extractor=extractor) as library:
            library.scan()
            assert len(library.search("only")) == 1
