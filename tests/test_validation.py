"""Tests for dropctl.core.validation module."""

from __future__ import annotations

import pytest

from dropctl.core.exceptions import (
    InvalidPortalURLError,
    InvalidURLError,
    PathValidationError,
    ValidationError,
)
from dropctl.core.validation import (
    get_portal_id,
    normalize_relpath,
    parse_portal_url,
    sanitize_relpath,
    strip_leading_slash,
    validate_chunk_size,
    validate_server_url,
    validate_timeout,
)

# =============================================================================
# URL Validation Tests
# =============================================================================


class TestValidateServerUrl:
    """Tests for validate_server_url."""

    def test_valid_http_url(self):
        assert validate_server_url("http://192.168.1.42:8080") == "http://192.168.1.42:8080"

    def test_strips_trailing_slash(self):
        assert validate_server_url("http://drop.local/") == "http://drop.local"

    def test_strips_whitespace(self):
        assert validate_server_url("  https://drop.local  ") == "https://drop.local"

    def test_empty_url_raises(self):
        with pytest.raises(InvalidURLError):
            validate_server_url("")

    def test_bad_scheme_raises(self):
        with pytest.raises(InvalidURLError, match="scheme"):
            validate_server_url("ftp://drop.local")

    def test_missing_host_raises(self):
        with pytest.raises(InvalidURLError):
            validate_server_url("http://")


class TestPortalId:
    """Tests for get_portal_id and parse_portal_url."""

    def test_extracts_id(self):
        assert get_portal_id("/p/p_abc123") == "p_abc123"

    def test_ignores_trailing_segments(self):
        assert get_portal_id("/p/p_abc123/extra") == "p_abc123"

    def test_no_portal_segment(self):
        assert get_portal_id("/") == ""
        assert get_portal_id("/x/p_abc123") == ""
        assert get_portal_id("") == ""

    def test_parse_portal_url(self):
        base, portal_id = parse_portal_url("http://192.168.1.42:8080/p/p_abc123/")
        assert base == "http://192.168.1.42:8080"
        assert portal_id == "p_abc123"

    def test_parse_non_portal_url_raises(self):
        with pytest.raises(InvalidPortalURLError):
            parse_portal_url("http://192.168.1.42/")

    def test_portal_url_error_is_url_error(self):
        with pytest.raises(InvalidURLError):
            parse_portal_url("http://192.168.1.42/files")


# =============================================================================
# Relative Path Tests
# =============================================================================


class TestRelpaths:
    """Tests for destination path normalization."""

    def test_strip_leading_slash(self):
        assert strip_leading_slash("//a/b") == "a/b"
        assert strip_leading_slash("a/b") == "a/b"

    def test_normalize_backslashes(self):
        assert normalize_relpath("\\dir\\file.txt") == "dir/file.txt"

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("x.txt", "x.txt"),
            ("/a/b.txt", "a/b.txt"),
            ("a//b/./c.txt", "a/b/c.txt"),
            ("dir\\sub\\f.bin", "dir/sub/f.bin"),
        ],
    )
    def test_sanitize_accepts(self, value: str, expected: str):
        assert sanitize_relpath(value) == expected

    @pytest.mark.parametrize(
        "value",
        ["", "/", ".", "../x", "a/../b", "~/secret", "C:/Windows/x", "a\x00b"],
    )
    def test_sanitize_rejects(self, value: str):
        with pytest.raises(PathValidationError):
            sanitize_relpath(value)

    def test_rejection_carries_reason(self):
        with pytest.raises(PathValidationError) as exc_info:
            sanitize_relpath("../etc/passwd")
        assert "parent" in exc_info.value.reason
        assert exc_info.value.path == "../etc/passwd"


class TestNumbers:
    """Tests for numeric settings validation."""

    def test_chunk_size(self):
        assert validate_chunk_size(1024) == 1024
        with pytest.raises(ValidationError):
            validate_chunk_size(0)

    def test_timeout(self):
        assert validate_timeout(2.5) == 2.5
        with pytest.raises(ValidationError):
            validate_timeout(-1)
