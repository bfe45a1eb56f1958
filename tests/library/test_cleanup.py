"""Tests for post-scan catalog cleanup."""

from euterpe.library.cleanup import clean_up_database
from euterpe.library.dal import TrackRecord


def _insert_track(catalog, fs_path, title, album, album_path, artist, number=0):
    with catalog.db.transaction() as cursor:
        artist_id = catalog.artists.ensure_artist(cursor, artist)
        album_id = catalog.albums.ensure_album(cursor, album, album_path)
        return catalog.tracks.insert_track(cursor, TrackRecord(
            fs_path=fs_path,
            title=title,
            album_id=album_id,
            artist_id=artist_id,
            number=number,
        ))


class TestCleanUpDatabase:
    """Test removal of missing tracks and dangling albums and artists."""

    def test_removes_rows_for_missing_files(self, catalog):
        """Test that tracks with nonexistent files and their album and artist go away."""
        _insert_track(
            catalog, "/nonexistent/lonely/track.mp3", "Lonesome Track",
            "Lonely Album", "/nonexistent/lonely", "Fruitless Fellow",
        )

        stats = clean_up_database(catalog)

        assert stats == {'tracks_deleted': 1, 'albums_deleted': 1, 'artists_deleted': 1}
        assert catalog.counts() == {'tracks': 0, 'albums': 0, 'artists': 0}

    def test_second_pass_deletes_nothing(self, catalog):
        """Test that cleanup is idempotent."""
        _insert_track(
            catalog, "/nonexistent/lonely/track.mp3", "Lonesome Track",
            "Lonely Album", "/nonexistent/lonely", "Fruitless Fellow",
        )

        clean_up_database(catalog)
        stats = clean_up_database(catalog)

        assert stats == {'tracks_deleted': 0, 'albums_deleted': 0, 'artists_deleted': 0}

    def test_keeps_rows_for_existing_files(self, catalog, music_root, make_track):
        path = make_track(music_root / "album" / "song.mp3", "Artist", "Album", "Song")
        catalog.upsert(path)

        stats = clean_up_database(catalog)

        assert stats['tracks_deleted'] == 0
        assert catalog.counts() == {'tracks': 1, 'albums': 1, 'artists': 1}

    def test_dangling_artist_on_surviving_album(self, catalog):
        """Test that an artist goes when its tracks go, even if their album stays."""
        _insert_track(catalog, "/lib/album/1.mp3", "Kept", "Compilation", "/lib/album", "Stays")
        _insert_track(catalog, "/lib/album/2.mp3", "Gone", "Compilation", "/lib/album", "Leaves")
        present = {"/lib/album/1.mp3"}

        stats = clean_up_database(catalog, exists=lambda path: path in present)

        assert stats == {'tracks_deleted': 1, 'albums_deleted': 0, 'artists_deleted': 1}
        assert [artist.name for artist in catalog.browse_artists().items] == ["Stays"]
        assert [album.name for album in catalog.browse_albums().items] == ["Compilation"]

    def test_removes_album_emptied_by_remove(self, catalog, music_root, make_track):
        """Test that albums and artists emptied by explicit removals are pruned."""
        path = make_track(music_root / "album" / "song.mp3", "Artist", "Album", "Song")
        catalog.upsert(path)
        catalog.remove(path)

        stats = clean_up_database(catalog)

        assert stats == {'tracks_deleted': 0, 'albums_deleted': 1, 'artists_deleted': 1}

    def test_unreadable_path_is_kept(self, catalog):
        """Test that a failing existence check does not delete the track."""
        _insert_track(catalog, "/lib/a/1.mp3", "T", "A", "/lib/a", "X")

        def exists(path):
            raise PermissionError(13, "Permission denied", path)

        stats = clean_up_database(catalog, exists=exists)

        assert stats['tracks_deleted'] == 0
        assert catalog.counts()['tracks'] == 1

    def test_file_restored_before_delete_is_kept(self, catalog, music_root, make_track):
        """Test that a file reappearing between the scan and the delete keeps its track."""
        path = make_track(music_root / "album" / "song.mp3", "Artist", "Album", "Song")
        track_id = catalog.upsert(path)
        checks = []

        def exists(fs_path):
            checks.append(fs_path)
            # Gone on the first look, re-created and re-cataloged by the second
            return len(checks) > 1

        stats = clean_up_database(catalog, exists=exists)

        assert len(checks) == 2
        assert stats == {'tracks_deleted': 0, 'albums_deleted': 0, 'artists_deleted': 0}
        assert catalog.get_track(track_id) is not None

    def test_delete_requires_matching_path(self, catalog):
        track_id = _insert_track(catalog, "/lib/a/1.mp3", "T", "A", "/lib/a", "X")

        with catalog.db.transaction() as cursor:
            deleted = catalog.tracks.delete_missing(cursor, [(track_id, "/lib/a/other.mp3")])

        assert deleted == 0
        assert catalog.counts()['tracks'] == 1
