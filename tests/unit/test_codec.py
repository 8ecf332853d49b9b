"""Unit tests for key and value encoding."""

from enum import Enum

import pytest

from etcdkv.codec import encode_key, format_value, key_path, key_segments, key_url
from etcdkv.errors import InvalidArgumentError, InvalidKeyTypeError


class Animal(Enum):
    cats = "felines"
    dogs = "canines"


class TestEncodeKey:
    """Tests for encode_key."""

    def test_none_is_root(self):
        """None should encode to the empty string (the root)."""
        assert encode_key(None) == ""

    def test_simple_string(self):
        """A plain string should encode to itself."""
        assert encode_key("foo") == "foo"

    def test_string_with_slashes(self):
        """Slashes in a string should stay literal separators."""
        assert encode_key("foo/bar") == "foo/bar"

    def test_unicode(self):
        """Each segment should be percent-encoded as UTF-8."""
        assert encode_key("∴/∎") == "%E2%88%B4/%E2%88%8E"

    def test_reserved_characters_escaped(self):
        """Characters with URL meaning should be escaped within a segment."""
        assert encode_key("a b?c#d&e") == "a%20b%3Fc%23d%26e"

    def test_enum_member_uses_name(self):
        """Enum members should stand for their names."""
        assert encode_key(Animal.cats) == "cats"

    def test_numbers(self):
        """Numbers should encode as their decimal string."""
        assert encode_key(42) == "42"
        assert encode_key(1.5) == "1.5"

    def test_sequences(self):
        """Sequences should join their encoded elements with slashes."""
        assert encode_key(["foo"]) == "foo"
        assert encode_key(["foo", "bar"]) == "foo/bar"
        assert encode_key(("foo", "bar")) == "foo/bar"
        assert encode_key([Animal.cats, "mittens", 3]) == "cats/mittens/3"

    def test_slash_in_segment_is_sub_segment(self):
        """A slash inside a sequence element should split it, not be escaped."""
        assert encode_key(["foo/bar", "baz"]) == "foo/bar/baz"
        assert encode_key("foo/bar") == encode_key(["foo", "bar"])

    def test_nested_sequences(self):
        """Nested sequences should flatten into one path."""
        assert encode_key(["a", ["b", "c"]]) == "a/b/c"

    def test_absolute_path_keeps_leading_slash(self):
        """Keys returned by the store are absolute and should stay so."""
        assert encode_key("/rand/00000000000000000007") == "/rand/00000000000000000007"

    def test_trailing_slash_dropped(self):
        """A trailing slash should not add an empty segment."""
        assert encode_key("foo/") == "foo"
        assert encode_key("/") == ""

    @pytest.mark.parametrize("key", [{"a": 1}, object(), b"bytes", True])
    def test_invalid_key_type(self, key):
        """Unsupported key types should raise InvalidKeyTypeError."""
        with pytest.raises(InvalidKeyTypeError) as exc_info:
            encode_key(key)
        assert exc_info.value.key is key

    def test_invalid_element_in_sequence(self):
        """An unsupported element anywhere in a sequence should raise."""
        with pytest.raises(InvalidKeyTypeError):
            encode_key(["ok", {"not": "ok"}])


class TestKeySegments:
    """Tests for key_segments."""

    def test_equivalent_representations(self):
        """String, sequence and enum forms should resolve to the same segments."""
        expected = ["cats", "mittens"]
        assert key_segments("cats/mittens") == expected
        assert key_segments(["cats", "mittens"]) == expected
        assert key_segments([Animal.cats, "mittens"]) == expected

    def test_segments_are_unescaped(self):
        """Segments should be the raw text, before percent-encoding."""
        assert key_segments("∴/∎") == ["∴", "∎"]

    def test_root(self):
        """None should have no segments."""
        assert key_segments(None) == []


class TestKeyPath:
    """Tests for key_path and key_url."""

    def test_relative_key(self):
        """A relative key should get exactly one separating slash."""
        assert key_path("foo") == "/keys/foo"

    def test_absolute_key(self):
        """An absolute key should not get a doubled slash."""
        assert key_path("/foo") == "/keys/foo"

    def test_root(self):
        """The root should target the keys directory itself."""
        assert key_path("") == "/keys/"

    def test_key_url(self):
        """key_url should combine base URL and encoded key."""
        base = "http://127.0.0.1:2379/v2"
        assert key_url(base, ["a", "b"]) == "http://127.0.0.1:2379/v2/keys/a/b"
        assert key_url(base, None) == "http://127.0.0.1:2379/v2/keys/"


class TestFormatValue:
    """Tests for format_value."""

    def test_strings_unchanged(self):
        """Strings, including the empty string, should pass through."""
        assert format_value("hi") == "hi"
        assert format_value("") == ""

    def test_numbers(self):
        """Numbers should be stringified."""
        assert format_value(3) == "3"
        assert format_value(2.5) == "2.5"

    def test_bools(self):
        """Bools should use the store's lowercase spelling."""
        assert format_value(True) == "true"
        assert format_value(False) == "false"

    def test_enum(self):
        """Enum members should be stored by name."""
        assert format_value(Animal.dogs) == "dogs"

    def test_invalid_value(self):
        """Unsupported values should raise InvalidArgumentError."""
        with pytest.raises(InvalidArgumentError):
            format_value(None)
        with pytest.raises(InvalidArgumentError):
            format_value([1, 2])
