"""
Unit tests for identifier normalization.
"""

import pytest

from service_proxy.app.domain.identifiers import expand_uuid, is_compact_uuid, normalize_username, normalize_uuid
from shared.errors import ValidationError


class TestUsernames:
    """Test cases for username validation."""

    @pytest.mark.parametrize("username", ["Notch", "a", "jeb_", "A1234567890bcdef", "___"])
    def test_valid_usernames(self, username):
        """Test well-formed usernames are accepted unchanged."""
        assert normalize_username(username) == username

    @pytest.mark.parametrize("username", ["", "ab cd", "A1234567890bcdefg", "name-with-dash", "über", "Notch\n"])
    def test_invalid_usernames(self, username):
        """Test malformed usernames raise ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            normalize_username(username)

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Invalid username"

    def test_case_is_preserved(self):
        """Test username case is kept for the upstream request."""
        assert normalize_username("NoTcH") == "NoTcH"


class TestUuids:
    """Test cases for uuid expansion and validation."""

    def test_expand_compact_uuid(self):
        """Test compact uuids expand to the dashed form."""
        assert expand_uuid("069a79f444e94726a5befca90e38aaf5") == "069a79f4-44e9-4726-a5be-fca90e38aaf5"

    def test_expand_rejects_wrong_length(self):
        """Test expansion rejects input that is not 32 characters."""
        with pytest.raises(ValueError):
            expand_uuid("069a79f4")

    def test_normalize_compact_uuid(self):
        """Test compact uuids normalize to the dashed form."""
        assert normalize_uuid("069a79f444e94726a5befca90e38aaf5") == "069a79f4-44e9-4726-a5be-fca90e38aaf5"

    def test_normalize_dashed_uuid(self):
        """Test dashed uuids pass through."""
        assert normalize_uuid("069a79f4-44e9-4726-a5be-fca90e38aaf5") == "069a79f4-44e9-4726-a5be-fca90e38aaf5"

    def test_normalize_lowercases(self):
        """Test uuids are lower-cased."""
        assert normalize_uuid("069A79F444E94726A5BEFCA90E38AAF5") == "069a79f4-44e9-4726-a5be-fca90e38aaf5"

    @pytest.mark.parametrize("value", [
        "",
        "not-a-uuid",
        "069a79f444e94726a5befca90e38aaf",      # 31 digits
        "069a79f444e94726a5befca90e38aaz5",     # non-hex
        "069a79f4-44e9-3726-a5be-fca90e38aaf5",  # version 3
        "069a79f4-44e9-4726-c5be-fca90e38aaf5",  # bad variant
        "069a79f444e9-4726-a5be-fca90e38aaf5",
    ])
    def test_invalid_uuids(self, value):
        """Test malformed or non-v4 uuids raise ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            normalize_uuid(value)

        assert exc_info.value.message == "Invalid uuid"

    def test_is_compact_uuid(self):
        """Test compact uuid detection."""
        assert is_compact_uuid("069A79F444E94726A5BEFCA90E38AAF5")
        assert not is_compact_uuid("069a79f4-44e9-4726-a5be-fca90e38aaf5")
