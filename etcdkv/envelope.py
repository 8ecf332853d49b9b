"""Response envelopes: a parsed body plus the protocol metadata beside it."""

import json
from dataclasses import dataclass
from typing import Any, Dict, NoReturn, Optional

import httpx

from etcdkv.errors import (
    InvalidJsonResponseError,
    MissingBodyError,
    from_error_body,
)
from etcdkv.node import Node

LEADER_PEER_URL_HEADER = "X-Leader-Peer-Url"
ETCD_INDEX_HEADER = "X-Etcd-Index"
RAFT_INDEX_HEADER = "X-Raft-Index"
RAFT_TERM_HEADER = "X-Raft-Term"


def _int_header(headers: httpx.Headers, name: str) -> Optional[int]:
    raw = headers.get(name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


@dataclass(frozen=True)
class ResponseMetadata:
    """Out-of-band information about a response, taken from its headers."""

    status: int
    """HTTP status code."""

    leader_peer_url: Optional[str] = None
    """Peer URL of the cluster leader, if the server reported one."""

    etcd_index: Optional[int] = None
    """Current store index."""

    raft_index: Optional[int] = None
    """Current raft log index."""

    raft_term: Optional[int] = None
    """Current raft term."""

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ResponseMetadata":
        headers = response.headers
        return cls(
            status=response.status_code,
            leader_peer_url=headers.get(LEADER_PEER_URL_HEADER),
            etcd_index=_int_header(headers, ETCD_INDEX_HEADER),
            raft_index=_int_header(headers, RAFT_INDEX_HEADER),
            raft_term=_int_header(headers, RAFT_TERM_HEADER),
        )


@dataclass(frozen=True)
class Envelope:
    """A store response: the JSON body and its metadata, kept apart.

    ``body`` is exactly what the store sent (``action``, ``node`` and, for
    updates, ``prevNode``); ``metadata`` never leaks into it.
    """

    body: Dict[str, Any]
    metadata: ResponseMetadata

    @property
    def action(self) -> Optional[str]:
        return self.body.get("action")

    @property
    def node(self) -> Optional[Node]:
        data = self.body.get("node")
        return Node.from_dict(data) if data is not None else None

    @property
    def prev_node(self) -> Optional[Node]:
        data = self.body.get("prevNode")
        return Node.from_dict(data) if data is not None else None


def parse_response(response: httpx.Response) -> Envelope:
    """Parse a successful store response.

    Args:
        response: Response returned by the transport

    Returns:
        Envelope holding the decoded body and the response metadata

    Raises:
        MissingBodyError: If the response has no body
        InvalidJsonResponseError: If the body is not a JSON object
    """
    if not response.content:
        raise MissingBodyError(response)

    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidJsonResponseError(response) from e

    if not isinstance(body, dict):
        raise InvalidJsonResponseError(response)

    return Envelope(body=body, metadata=ResponseMetadata.from_response(response))


def raise_for_store_error(error: httpx.HTTPStatusError) -> NoReturn:
    """Re-raise an HTTP error status as the store's own error, if possible.

    The store describes failures with a JSON object such as
    ``{"errorCode": 101, "message": "Compare failed", "cause": "[a != b]",
    "index": 8}``. When the error response carries one, it becomes the raised
    StoreError with the HTTP status folded in. Otherwise the original
    HTTPStatusError is raised unchanged.

    Args:
        error: The transport's error for a non-2xx/3xx response

    Raises:
        StoreError: The normalized store error
        httpx.HTTPStatusError: If the body is not a JSON object
    """
    response = error.response
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None

    if not isinstance(body, dict):
        raise error

    raise from_error_body(body, status=response.status_code) from error
