"""Key and value encoding for the etcd v2 keys API.

Keys may be given in several interchangeable forms, all of which resolve to
the same slash-separated store path:

- ``None``: the root directory
- a string: ``"cats/mittens"``; forward slashes separate path segments
- a number: ``42`` is the same key as ``"42"``
- an enum member: stands for its name, like a symbolic identifier
- a list or tuple of any of the above: ``["cats", "mittens"]``

Every segment is percent-encoded on its own, so a forward slash is always a
separator and never part of a segment.
"""

from enum import Enum
from numbers import Number
from typing import Any, List, Sequence, Union
from urllib.parse import quote

from etcdkv.errors import InvalidArgumentError, InvalidKeyTypeError

Scalar = Union[str, int, float, Enum]
"""A single key segment (which may still contain slashes if it is a string)."""

Key = Union[None, Scalar, Sequence[Any]]
"""Any key representation accepted by the client."""

Value = Union[str, int, float, bool, Enum]
"""Values are stored as strings; these types are stringified on the way out."""


def key_segments(key: Key) -> List[str]:
    """Resolve a key to its canonical, unescaped path segments.

    Args:
        key: Any supported key representation

    Returns:
        List of text segments. A leading empty segment marks an absolute
        path (``"/foo"`` -> ``["", "foo"]``).

    Raises:
        InvalidKeyTypeError: If the key (or any element of it) is of an
            unsupported type

    Example:
        >>> key_segments(["foo/bar", "baz"])
        ['foo', 'bar', 'baz']
    """
    if key is None:
        return []

    # Enum first: str-based enums would otherwise be taken as plain strings
    if isinstance(key, Enum):
        return key_segments(key.name)

    if isinstance(key, str):
        segments = key.split("/")
        # Trailing separators do not name an extra, empty segment
        while segments and segments[-1] == "":
            segments.pop()
        return segments

    if isinstance(key, bool):
        raise InvalidKeyTypeError(key)

    if isinstance(key, Number):
        return key_segments(str(key))

    if isinstance(key, (list, tuple)):
        segments = []
        for element in key:
            segments.extend(key_segments(element))
        return segments

    raise InvalidKeyTypeError(key)


def encode_key(key: Key) -> str:
    """Encode a key as a percent-escaped store path.

    Args:
        key: Any supported key representation

    Returns:
        The encoded path without the ``/keys`` prefix. The root encodes as
        the empty string.

    Example:
        >>> encode_key("∴/∎")
        '%E2%88%B4/%E2%88%8E'
        >>> encode_key(["foo", "bar"])
        'foo/bar'
    """
    if isinstance(key, (list, tuple)):
        return "/".join(encode_key(element) for element in key)

    return "/".join(quote(segment, safe="") for segment in key_segments(key))


def key_path(encoded: str) -> str:
    """Prefix an encoded key with the keys namespace.

    Exactly one slash separates ``/keys`` from the key, whether the key is
    absolute (``"/foo"``) or relative (``"foo"``).
    """
    if encoded.startswith("/"):
        return "/keys" + encoded
    return "/keys/" + encoded


def key_url(base_url: str, key: Key) -> str:
    """Build the full URL for a key.

    Example:
        >>> key_url("http://127.0.0.1:2379/v2", "foo")
        'http://127.0.0.1:2379/v2/keys/foo'
    """
    return base_url + key_path(encode_key(key))


def format_value(value: Value) -> str:
    """Convert a value to the string form the store keeps.

    Args:
        value: String, number, bool, or enum member

    Returns:
        The value as text; bools become ``"true"``/``"false"``

    Raises:
        InvalidArgumentError: If the value cannot be sent as text
    """
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Number):
        return str(value)
    raise InvalidArgumentError(f"Cannot store {value!r} as a value")
