"""Tests for filestore.storage.paths module.

Covers:
    - normalize_path: separator trimming, empty and "." components
    - path_segments: splitting, empty components
    - validate_location: traversal and name checks
    - directory_for / file_location: on-disk layout
"""

from pathlib import Path

import pytest

from filestore.errors import InvalidRequestError
from filestore.storage.paths import (
    directory_for,
    file_location,
    normalize_path,
    path_segments,
    validate_location,
)


@pytest.mark.fast
class TestNormalizePath:
    """Tests for normalize_path()."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("/docs/2024", "docs/2024"),
            ("docs/2024/", "docs/2024"),
            ("/docs/2024/", "docs/2024"),
            ("docs/2024", "docs/2024"),
            ("///docs///", "docs"),
            ("/", ""),
            ("", ""),
        ],
    )
    def test_strips_both_ends(self, raw, expected):
        assert normalize_path(raw) == expected

    @pytest.mark.parametrize("raw", ["a//b", "a/./b", "./a/b", "a/b/.", "//a///b//"])
    def test_collapses_aliases_of_one_directory(self, raw):
        assert normalize_path(raw) == "a/b"

    def test_dot_only_is_root(self):
        assert normalize_path("./.") == ""

    def test_idempotent(self):
        once = normalize_path("/a/b/")
        assert normalize_path(once) == once


@pytest.mark.fast
class TestPathSegments:
    """Tests for path_segments()."""

    def test_basic(self):
        assert path_segments("docs/2024") == ["docs", "2024"]

    def test_ignores_empty_components(self):
        assert path_segments("/a//b/") == ["a", "b"]

    def test_ignores_current_directory(self):
        assert path_segments("./a/./b") == ["a", "b"]

    def test_empty(self):
        assert path_segments("") == []


@pytest.mark.fast
class TestValidateLocation:
    """Tests for validate_location()."""

    def test_accepts_plain_location(self):
        validate_location("/docs/2024/", "report.pdf")

    def test_accepts_dots_inside_names(self):
        validate_location("docs/v1..2", "..hidden")

    @pytest.mark.parametrize("path", ["..", "../etc", "docs/../../etc", "/a/../"])
    def test_rejects_parent_segments(self, path):
        with pytest.raises(InvalidRequestError, match="'..' segments"):
            validate_location(path, "passwd")

    @pytest.mark.parametrize("name", ["a/b", "/x", ".", ".."])
    def test_rejects_bad_names(self, name):
        with pytest.raises(InvalidRequestError, match="Invalid name"):
            validate_location("docs", name)

    def test_rejects_nul_in_path(self):
        with pytest.raises(InvalidRequestError, match="NUL"):
            validate_location("docs\x00", "a.txt")

    def test_rejects_nul_in_name(self):
        with pytest.raises(InvalidRequestError, match="Invalid name"):
            validate_location("docs", "x\x00y")

    def test_error_is_a_400(self):
        with pytest.raises(InvalidRequestError) as exc_info:
            validate_location("..", "x")
        assert exc_info.value.status_code == 400


@pytest.mark.fast
class TestLocations:
    """Tests for directory_for() and file_location()."""

    def test_directory_for(self):
        assert directory_for("/base", "/docs/2024/") == Path("/base/docs/2024")

    def test_directory_for_empty_path_is_root(self):
        assert directory_for("/base", "") == Path("/base")

    def test_file_location(self):
        assert file_location("/base", "docs/2024", "report.pdf") == Path("/base/docs/2024/report.pdf")
