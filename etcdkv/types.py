"""Type definitions for the etcdkv client."""

from dataclasses import dataclass
from typing import Dict, Optional

from etcdkv.envelope import Envelope

DEFAULT_TIMEOUT_MS = 1000
"""Default request timeout in milliseconds."""

DEFAULT_SWAP_RETRY_DELAY_MS = 100
"""Default pause between conflicted swap attempts, in milliseconds."""

API_VERSION = "v2"


def _param(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _params(**fields: object) -> Dict[str, str]:
    """Query parameters for every field that was set."""
    return {name: _param(value) for name, value in fields.items() if value is not None}


@dataclass(frozen=True)
class ClientConfig:
    """Configuration for EtcdClient. Immutable once created."""

    endpoint: str
    """Server URI, e.g. ``"http://127.0.0.1:2379"``."""

    timeout: int = DEFAULT_TIMEOUT_MS
    """Request timeout in milliseconds, for both connecting and reading."""

    swap_retry_delay: int = DEFAULT_SWAP_RETRY_DELAY_MS
    """Approximate pause between swap attempts that lost a CAS race, in ms."""

    @property
    def base_url(self) -> str:
        """Base URL for all requests, e.g. ``"http://127.0.0.1:2379/v2"``."""
        return f"{self.endpoint.rstrip('/')}/{API_VERSION}"


@dataclass
class GetOptions:
    """Options for Get operations."""

    recursive: Optional[bool] = None
    """List directories recursively."""

    consistent: Optional[bool] = None
    """Ask the leader to serve the read."""

    sorted: Optional[bool] = None
    """Return directory children sorted by key."""

    wait: Optional[bool] = None
    """Block until the key changes."""

    wait_index: Optional[int] = None
    """With ``wait``, the index to wait from."""

    timeout: Optional[int] = None
    """Per-request timeout in milliseconds; overrides the client's."""

    def to_params(self) -> Dict[str, str]:
        return _params(
            recursive=self.recursive,
            consistent=self.consistent,
            sorted=self.sorted,
            wait=self.wait,
            waitIndex=self.wait_index,
        )


@dataclass
class PutOptions:
    """Options for Put and Create operations."""

    ttl: Optional[int] = None
    """Time-to-live in seconds. None means no expiration."""

    timeout: Optional[int] = None
    """Per-request timeout in milliseconds; overrides the client's."""

    def to_params(self) -> Dict[str, str]:
        return _params(ttl=self.ttl)


@dataclass
class CasOptions:
    """Options for compare-and-swap operations.

    The constraint that names the operation (``prev_value`` for ``cas``,
    ``prev_index`` for ``cas_index``) is taken from the call's arguments;
    the other constraints here apply in addition to it.
    """

    prev_value: Optional[str] = None
    """Only swap if the current value equals this."""

    prev_index: Optional[int] = None
    """Only swap if the current modifiedIndex equals this."""

    prev_exist: Optional[bool] = None
    """Only swap if the key does (True) or does not (False) exist."""

    ttl: Optional[int] = None
    """Time-to-live of the new value in seconds."""

    timeout: Optional[int] = None
    """Per-request timeout in milliseconds; overrides the client's."""

    def to_params(self) -> Dict[str, str]:
        return _params(
            prevValue=self.prev_value,
            prevIndex=self.prev_index,
            prevExist=self.prev_exist,
            ttl=self.ttl,
        )


@dataclass
class DeleteOptions:
    """Options for Delete operations."""

    recursive: Optional[bool] = None
    """Delete a directory and everything below it."""

    dir: Optional[bool] = None
    """Allow deleting an (empty) directory."""

    timeout: Optional[int] = None
    """Per-request timeout in milliseconds; overrides the client's."""

    def to_params(self) -> Dict[str, str]:
        return _params(recursive=self.recursive, dir=self.dir)


@dataclass(frozen=True)
class CasResult:
    """Outcome of a compare-and-swap.

    Either applied, carrying the store's response, or conflicted because the
    compare did not hold. Losing a race is an expected outcome, not an error;
    the result is truthy only when the swap was applied.
    """

    envelope: Optional[Envelope] = None
    """Store response for an applied swap; None when conflicted."""

    @property
    def applied(self) -> bool:
        return self.envelope is not None

    @property
    def conflicted(self) -> bool:
        return self.envelope is None

    def __bool__(self) -> bool:
        return self.applied

    def __repr__(self) -> str:
        if self.applied:
            return f"CasResult(applied, action={self.envelope.action!r})"
        return "CasResult(conflicted)"


CONFLICTED = CasResult()
"""The conflicted CAS outcome."""
