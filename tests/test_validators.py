"""Tests for input validators and sanitizers."""

import pytest

from shortener.core.exceptions import InvalidCodeError
from shortener.core.validators import (
    MAX_URL_LENGTH,
    RESERVED_CODES,
    is_valid_url,
    sanitize_owner_id,
    sanitize_short_code,
    validate_custom_code,
)


class TestURLValidation:
    """Test is_valid_url()."""

    def test_valid_urls(self):
        """Test that valid URLs are accepted."""
        valid_urls = [
            "http://example.com",
            "https://example.com/a",
            "https://www.example.com/path/to/page",
            "http://subdomain.example.com:8080/path?query=value",
            "HTTPS://EXAMPLE.COM",
        ]
        for url in valid_urls:
            assert is_valid_url(url), f"Should be valid: {url}"

    def test_invalid_urls(self):
        """Test that invalid URLs are rejected."""
        invalid_urls = [
            "not a url",
            "not-a-url",
            "ftp://example.com",
            "javascript:alert(1)",
            "example.com",
            "",
            "http://",
            "http://:80",
            "https://example.com:99999",
            "https://exa mple.com",
            None,
        ]
        for url in invalid_urls:
            assert not is_valid_url(url), f"Should be invalid: {url}"

    def test_length_limit(self):
        prefix = "https://example.com/"
        assert is_valid_url(prefix + "a" * (MAX_URL_LENGTH - len(prefix)))
        assert not is_valid_url(prefix + "a" * (MAX_URL_LENGTH - len(prefix) + 1))


class TestValidateCustomCode:
    """Test validate_custom_code()."""

    def test_accepts_shortest_and_longest(self):
        assert validate_custom_code("ab") == "ab"
        assert validate_custom_code("a" * 20) == "a" * 20

    def test_rejects_bad_length(self):
        with pytest.raises(InvalidCodeError) as exc_info:
            validate_custom_code("a")
        assert exc_info.value.reason == "Custom code must be between 2 and 20 characters"

        with pytest.raises(InvalidCodeError):
            validate_custom_code("a" * 21)

    @pytest.mark.parametrize("code", ["my-code", "my_code", "héllo", "a b", "a/b", "a.b"])
    def test_rejects_bad_alphabet(self, code):
        with pytest.raises(InvalidCodeError):
            validate_custom_code(code)

    def test_separators_when_enabled(self):
        assert validate_custom_code("my-code", allow_separators=True) == "my-code"
        assert validate_custom_code("my_code", allow_separators=True) == "my_code"

        with pytest.raises(InvalidCodeError):
            validate_custom_code("my.code", allow_separators=True)

    @pytest.mark.parametrize("code", sorted(RESERVED_CODES))
    def test_rejects_route_names(self, code):
        """Codes that would be shadowed by one of the app's own routes."""
        with pytest.raises(InvalidCodeError) as exc_info:
            validate_custom_code(code)
        assert "reserved" in exc_info.value.reason

    def test_route_names_are_case_sensitive(self):
        assert validate_custom_code("Health") == "Health"

    def test_custom_bounds(self):
        assert validate_custom_code("abcd", min_length=4, max_length=8) == "abcd"
        with pytest.raises(InvalidCodeError):
            validate_custom_code("abc", min_length=4, max_length=8)


class TestSanitizeShortCode:
    """Test sanitize_short_code()."""

    def test_valid_codes(self):
        assert sanitize_short_code("aZ3kQ9") == "aZ3kQ9"
        assert sanitize_short_code("  ab  ") == "ab"
        assert sanitize_short_code("my-code_1") == "my-code_1"

    def test_invalid_codes(self):
        for code in ["", "   ", "a" * 21, "bad$code", "../etc", None]:
            assert sanitize_short_code(code) is None, f"Should be rejected: {code!r}"


class TestSanitizeOwnerId:
    """Test sanitize_owner_id()."""

    def test_trims_and_accepts(self):
        assert sanitize_owner_id("  owner-1 ") == "owner-1"

    def test_rejects_blank_long_and_unprintable(self):
        assert sanitize_owner_id(None) is None
        assert sanitize_owner_id("   ") is None
        assert sanitize_owner_id("x" * 65) is None
        assert sanitize_owner_id("owner\x00") is None
