"""Tests for mutagen-based metadata extraction."""

import wave

import pytest
from mutagen.asf import ASFTags
from mutagen.id3 import TALB, TIT2, TPE1, TPE2, TRCK
from mutagen.wave import WAVE

from euterpe.library.errors import MetadataExtractionError
from euterpe.library.metadata import MetadataExtractor, parse_track_number, read_tag


def write_wav(path, seconds=2, rate=8000):
    """Write a silent mono 16-bit WAV file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with wave.open(str(path), "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(rate)
        wav.writeframes(b"\x00\x00" * rate * seconds)
    return path


class TestParseTrackNumber:

    @pytest.mark.parametrize("value,expected", [
        ("3", 3),
        ("03/12", 3),
        (" 7 ", 7),
        ("12/", 12),
        (None, 0),
        ("", 0),
        ("side A", 0),
        ("-2", 0),
    ])
    def test_parse(self, value, expected):
        assert parse_track_number(value) == expected


class TestMetadataExtractor:
    """Test extraction with real files."""

    def test_untagged_wav_falls_back(self, tmp_path):
        """Test that a file without tags gets stem, Unknown and directory name."""
        path = write_wav(tmp_path / "Field Recordings" / "rain on roof.wav")

        metadata = MetadataExtractor().extract(path)

        assert metadata.title == "rain on roof"
        assert metadata.artist == "Unknown"
        assert metadata.album == "Field Recordings"
        assert metadata.track_number == 0
        assert metadata.duration == 2

    def test_junk_file_raises(self, tmp_path):
        path = tmp_path / "fake.mp3"
        path.write_bytes(b"this is not audio")

        with pytest.raises(MetadataExtractionError) as exc_info:
            MetadataExtractor().extract(path)

        assert exc_info.value.context['path'] == str(path)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(MetadataExtractionError):
            MetadataExtractor().extract(tmp_path / "missing.flac")

    def test_tagged_wav_reads_id3_frames(self, tmp_path):
        """Test that WAV files carrying raw ID3 frames get their tags read."""
        path = write_wav(tmp_path / "folder" / "file.wav")
        audio = WAVE(path)
        audio.add_tags()
        audio.tags.add(TIT2(encoding=3, text=["Real Title"]))
        audio.tags.add(TPE1(encoding=3, text=["Real Artist"]))
        audio.tags.add(TALB(encoding=3, text=["Real Album"]))
        audio.tags.add(TRCK(encoding=3, text=["4/10"]))
        audio.save()

        metadata = MetadataExtractor().extract(path)

        assert metadata.title == "Real Title"
        assert metadata.artist == "Real Artist"
        assert metadata.album == "Real Album"
        assert metadata.track_number == 4
        assert metadata.duration == 2

    def test_album_artist_used_when_artist_missing(self, tmp_path):
        path = write_wav(tmp_path / "folder" / "file.wav")
        audio = WAVE(path)
        audio.add_tags()
        audio.tags.add(TPE2(encoding=3, text=["Various Artists"]))
        audio.save()

        metadata = MetadataExtractor().extract(path)

        assert metadata.artist == "Various Artists"
        assert metadata.title == "file"


class TestReadTag:
    """Test tag lookup across tag flavours."""

    def test_asf_tags(self):
        tags = ASFTags()
        tags["Title"] = ["Song"]
        tags["Author"] = ["Band"]
        tags["WM/AlbumTitle"] = ["Record"]
        tags["WM/TrackNumber"] = ["7"]

        assert read_tag(tags, 'title') == "Song"
        assert read_tag(tags, 'artist') == "Band"
        assert read_tag(tags, 'album') == "Record"
        assert parse_track_number(read_tag(tags, 'tracknumber')) == 7
        assert read_tag(tags, 'albumartist') is None

    def test_easy_mapping(self):
        tags = {'title': ["  Spaced  "], 'artist': [""]}

        assert read_tag(tags, 'title') == "Spaced"
        assert read_tag(tags, 'artist') is None
        assert read_tag(tags, 'album') is None

    def test_no_tags(self):
        assert read_tag(None, 'title') is None
