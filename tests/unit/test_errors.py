"""Unit tests for error classes."""

import httpx
import pytest

from etcdkv.errors import (
    CompareFailedError,
    DirectoryNotEmptyError,
    EtcdError,
    InvalidArgumentError,
    InvalidJsonResponseError,
    InvalidKeyTypeError,
    KeyNotFoundError,
    MissingBodyError,
    NodeExistsError,
    NotADirError,
    NotAFileError,
    ResponseParseError,
    StoreError,
    SwapRetryExhaustedError,
    from_error_body,
)


class TestEtcdError:
    """Tests for base EtcdError class."""

    def test_base_error_creation(self):
        """Should create error with message."""
        error = EtcdError("test error")
        assert str(error) == "test error"
        assert error.code is None

    def test_base_error_with_code(self):
        """Should create error with message and code."""
        error = EtcdError("test error", "TEST_CODE")
        assert str(error) == "test error"
        assert error.code == "TEST_CODE"

    def test_base_error_repr(self):
        """Should have readable repr."""
        error = EtcdError("test error", "TEST_CODE")
        assert "EtcdError" in repr(error)
        assert "test error" in repr(error)
        assert "TEST_CODE" in repr(error)


class TestInvalidArgumentError:
    """Tests for InvalidArgumentError class."""

    def test_invalid_argument_error(self):
        """Should create InvalidArgumentError."""
        error = InvalidArgumentError("invalid argument")
        assert str(error) == "invalid argument"
        assert error.code == "INVALID_ARGUMENT"


class TestInvalidKeyTypeError:
    """Tests for InvalidKeyTypeError class."""

    def test_invalid_key_type_error(self):
        """Should keep the offending key and mention it in the message."""
        key = {"a": 1}
        error = InvalidKeyTypeError(key)
        assert error.key is key
        assert error.code == "INVALID_KEY_TYPE"
        assert "{'a': 1}" in str(error)
        assert "InvalidKeyTypeError" in repr(error)


class TestResponseParseErrors:
    """Tests for MissingBodyError and InvalidJsonResponseError."""

    def test_missing_body_error(self):
        """Should carry the response."""
        response = httpx.Response(204)
        error = MissingBodyError(response)
        assert isinstance(error, ResponseParseError)
        assert error.response is response
        assert error.code == "MISSING_BODY"
        assert "204" in repr(error)

    def test_invalid_json_error(self):
        """Should carry the response."""
        response = httpx.Response(200, text="nope")
        error = InvalidJsonResponseError(response)
        assert isinstance(error, ResponseParseError)
        assert error.response is response
        assert error.code == "INVALID_JSON_RESPONSE"


class TestStoreError:
    """Tests for StoreError class."""

    def test_store_error_fields(self):
        """Should hold status and the store's error fields."""
        error = StoreError(
            "Key not found", status=404, error_code=100, cause="/foo", index=3
        )
        assert str(error) == "Key not found"
        assert error.code == "STORE_ERROR"
        assert error.status == 404
        assert error.error_code == 100
        assert error.cause == "/foo"
        assert error.index == 3

    def test_store_error_repr(self):
        """Should have readable repr."""
        error = StoreError("Compare failed", status=412, error_code=101)
        assert "StoreError" in repr(error)
        assert "412" in repr(error)
        assert "101" in repr(error)


class TestSwapRetryExhaustedError:
    """Tests for SwapRetryExhaustedError class."""

    def test_swap_retry_exhausted_error(self):
        """Should create SwapRetryExhaustedError with key and attempts."""
        error = SwapRetryExhaustedError("counter", attempts=3)
        assert error.code == "SWAP_RETRY_EXHAUSTED"
        assert error.key == "counter"
        assert error.attempts == 3
        assert "3" in str(error)


class TestFromErrorBody:
    """Tests for from_error_body function."""

    @pytest.mark.parametrize(
        "error_code,error_class",
        [
            (100, KeyNotFoundError),
            (101, CompareFailedError),
            (102, NotAFileError),
            (104, NotADirError),
            (105, NodeExistsError),
            (108, DirectoryNotEmptyError),
        ],
    )
    def test_error_code_mapping(self, error_code, error_class):
        """Should map store error codes to their error classes."""
        error = from_error_body({"errorCode": error_code, "message": "m"}, status=400)
        assert isinstance(error, error_class)
        assert isinstance(error, StoreError)
        assert error.error_code == error_code
        assert error.status == 400

    def test_unknown_code(self):
        """Should fall back to StoreError."""
        error = from_error_body({"errorCode": 401, "message": "The event in requested index is outdated and cleared"})
        assert type(error) is StoreError
        assert error.status is None

    def test_missing_message(self):
        """Should synthesize a message when the payload has none."""
        error = from_error_body({"errorCode": 100})
        assert "100" in str(error)

    def test_all_fields(self):
        """Should copy cause and index."""
        error = from_error_body(
            {"errorCode": 105, "message": "Key already exists", "cause": "/foo", "index": 42},
            status=412,
        )
        assert error.cause == "/foo"
        assert error.index == 42
        assert error.status == 412
