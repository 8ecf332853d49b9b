"""Custom error classes for the etcdkv client."""

from typing import Any, Dict, Optional, Type

import httpx


class EtcdError(Exception):
    """Base error class for all etcdkv errors."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code

    def __repr__(self) -> str:
        if self.code:
            return f"{self.__class__.__name__}(message={str(self)!r}, code={self.code!r})"
        return f"{self.__class__.__name__}(message={str(self)!r})"


class InvalidArgumentError(EtcdError):
    """Error indicating invalid request parameters or configuration."""

    def __init__(self, message: str):
        super().__init__(message, "INVALID_ARGUMENT")


class InvalidKeyTypeError(EtcdError):
    """Error indicating a key that cannot be interpreted as a store path."""

    def __init__(self, key: Any):
        super().__init__(
            f"Don't know how to interpret {key!r} as key", "INVALID_KEY_TYPE"
        )
        self.key = key

    def __repr__(self) -> str:
        return f"InvalidKeyTypeError(key={self.key!r})"


class ResponseParseError(EtcdError):
    """Error indicating the store answered with something we cannot read."""

    def __init__(self, message: str, code: str, response: httpx.Response):
        super().__init__(message, code)
        self.response = response

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(message={str(self)!r}, "
            f"status={self.response.status_code})"
        )


class MissingBodyError(ResponseParseError):
    """Error indicating the response carried no body."""

    def __init__(self, response: httpx.Response):
        super().__init__("Response has no body", "MISSING_BODY", response)


class InvalidJsonResponseError(ResponseParseError):
    """Error indicating the response body is not valid JSON."""

    def __init__(self, response: httpx.Response):
        super().__init__(
            "Response body is not valid JSON", "INVALID_JSON_RESPONSE", response
        )


class StoreError(EtcdError):
    """Error reported by the store itself.

    Carries the HTTP status alongside the store's own error payload, so
    callers can match on either ``status`` or ``error_code``.
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        error_code: Optional[int] = None,
        cause: Optional[str] = None,
        index: Optional[int] = None,
    ):
        super().__init__(message, "STORE_ERROR")
        self.status = status
        self.error_code = error_code
        self.cause = cause
        self.index = index

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(message={str(self)!r}, "
            f"status={self.status!r}, error_code={self.error_code!r}, "
            f"cause={self.cause!r}, index={self.index!r})"
        )


class KeyNotFoundError(StoreError):
    """errorCode 100: the key does not exist."""


class CompareFailedError(StoreError):
    """errorCode 101: a prevValue/prevIndex condition did not hold.

    The CAS operations turn this into a conflicted result instead of raising.
    """


class NotAFileError(StoreError):
    """errorCode 102: a value operation was attempted on a directory."""


class NotADirError(StoreError):
    """errorCode 104: a directory operation was attempted on a value."""


class NodeExistsError(StoreError):
    """errorCode 105: the key already exists (prevExist=false)."""


class DirectoryNotEmptyError(StoreError):
    """errorCode 108: a non-recursive delete hit a populated directory."""


class SwapRetryExhaustedError(EtcdError):
    """Error indicating a bounded swap lost every compare-and-swap race."""

    def __init__(self, key: Any, attempts: int):
        super().__init__(
            f"swap of {key!r} conflicted on all {attempts} attempts",
            "SWAP_RETRY_EXHAUSTED",
        )
        self.key = key
        self.attempts = attempts

    def __repr__(self) -> str:
        return (
            f"SwapRetryExhaustedError(message={str(self)!r}, "
            f"key={self.key!r}, attempts={self.attempts})"
        )


ERROR_CODES: Dict[int, Type[StoreError]] = {
    100: KeyNotFoundError,
    101: CompareFailedError,
    102: NotAFileError,
    104: NotADirError,
    105: NodeExistsError,
    108: DirectoryNotEmptyError,
}


def from_error_body(body: Dict[str, Any], status: Optional[int] = None) -> StoreError:
    """Convert a store error payload to an etcdkv error.

    Args:
        body: Decoded JSON error object, e.g.
            ``{"errorCode": 100, "message": "Key not found", "cause": "/foo", "index": 7}``
        status: HTTP status of the response that carried it

    Returns:
        Appropriate StoreError subclass
    """
    error_code = body.get("errorCode")
    message = body.get("message") or f"Store error {error_code}"

    error_class = ERROR_CODES.get(error_code, StoreError)
    return error_class(
        message,
        status=status,
        error_code=error_code,
        cause=body.get("cause"),
        index=body.get("index"),
    )
