"""
Tests for folder scanning (sync/scanner.py).
"""

import re

import pytest

from letterboxd_sync.core.exceptions import ScanError
from letterboxd_sync.sync.scanner import (
    compile_pattern,
    extract_candidate,
    list_files,
    scan_candidates,
)


@pytest.fixture
def movie_folder(tmp_path):
    """Folder with a few movie files, one stray file and a subdirectory"""
    folder = tmp_path / "movies"
    folder.mkdir()
    for name in [
        "Solaris.1972.1080p.mkv",
        "Stalker.1979.720p.mkv",
        "notes.txt",
    ]:
        (folder / name).write_text("")
    (folder / "Extras.2001.dir").mkdir()
    return folder


class TestExtractCandidate:
    """Tests for extract_candidate()"""

    def test_uses_first_group(self):
        pattern = re.compile(r"^(.+?)\.\d{4}\.")

        assert extract_candidate(pattern, "Solaris.1972.1080p.mkv") == "Solaris"

    def test_uses_whole_match_without_groups(self):
        pattern = re.compile(r"^[A-Za-z]+")

        assert extract_candidate(pattern, "Solaris.1972.mkv") == "Solaris"

    def test_named_title_and_year(self):
        pattern = re.compile(r"^(?P<title>.+) \((?P<year>\d{4})\)")

        assert extract_candidate(pattern, "Solaris (1972).mkv") == "Solaris 1972"

    def test_optional_year_not_matched(self):
        pattern = re.compile(r"^(?P<title>[^(.]+?)\s*(?:\((?P<year>\d{4})\))?\.mkv$")

        assert extract_candidate(pattern, "Solaris.mkv") == "Solaris"

    def test_no_match_returns_none(self):
        pattern = re.compile(r"^(.+?)\.\d{4}\.")

        assert extract_candidate(pattern, "notes.txt") is None

    def test_blank_capture_returns_none(self):
        pattern = re.compile(r"^(\s*)\.mkv$")

        assert extract_candidate(pattern, "  .mkv") is None

    def test_strips_whitespace(self):
        pattern = re.compile(r"^(.+)\.mkv$")

        assert extract_candidate(pattern, " Solaris .mkv") == "Solaris"

    def test_keeps_dots_and_underscores(self):
        pattern = re.compile(r"^(.+)\.\d{4}\.")

        assert extract_candidate(pattern, "Blade_Runner.2049.1972.mkv") == "Blade_Runner.2049"


class TestScanCandidates:
    """Tests for scan_candidates() and its helpers"""

    def test_scans_matching_files_in_order(self, movie_folder):
        candidates = scan_candidates(movie_folder, r"^(.+?)\.(\d{4})\.")

        assert candidates == ["Solaris", "Stalker"]

    def test_skips_subdirectories(self, movie_folder):
        assert "Extras.2001.dir" not in list(list_files(movie_folder))

    def test_keeps_duplicates(self, tmp_path):
        (tmp_path / "Solaris.1972.CD1.avi").write_text("")
        (tmp_path / "Solaris.1972.CD2.avi").write_text("")

        assert scan_candidates(tmp_path, r"^(.+?)\.\d{4}\.") == ["Solaris", "Solaris"]

    def test_empty_folder(self, tmp_path):
        assert scan_candidates(tmp_path, r"^(.+)$") == []

    def test_missing_folder_raises(self, tmp_path):
        with pytest.raises(ScanError):
            scan_candidates(tmp_path / "missing", r"^(.+)$")

    def test_file_instead_of_folder_raises(self, tmp_path):
        path = tmp_path / "file.mkv"
        path.write_text("")

        with pytest.raises(ScanError):
            scan_candidates(path, r"^(.+)$")

    def test_invalid_pattern_raises(self, movie_folder):
        with pytest.raises(ScanError) as exc_info:
            scan_candidates(movie_folder, r"^(unclosed")

        assert exc_info.value.details["pattern"] == r"^(unclosed"

    def test_compile_pattern(self):
        assert compile_pattern(r"^(.+)$").groups == 1
