"""etcdkv: an asyncio client for the etcd v2 keys API.

Keys form a filesystem-like tree. Reads come back as plain values: a string
for a leaf, a dict for a directory. Writes can be conditional on the current
value or modification index, and ``swap`` builds lock-free read-modify-write
on top of that.

Example:
    >>> import asyncio
    >>> import etcdkv
    >>>
    >>> async def main():
    ...     async with etcdkv.connect("http://127.0.0.1:2379") as etcd:
    ...         # Set a value
    ...         await etcd.reset(["counters", "hits"], 0)
    ...
    ...         # Increment it, retrying if another writer races us
    ...         await etcd.swap(["counters", "hits"], lambda v: int(v) + 1)
    ...
    ...         # Read the directory back
    ...         print(await etcd.get("counters"))  # {'hits': '1'}
    >>>
    >>> asyncio.run(main())
"""

__version__ = "0.1.0"

from etcdkv.client import EtcdClient, connect
from etcdkv.codec import encode_key, key_segments
from etcdkv.config import load_config
from etcdkv.envelope import Envelope, ResponseMetadata
from etcdkv.ephemeral import EphemeralEtcd, EphemeralServerError, create_ephemeral
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
)
from etcdkv.node import Node, node_to_value
from etcdkv.types import (
    CasOptions,
    CasResult,
    ClientConfig,
    DeleteOptions,
    GetOptions,
    PutOptions,
)

__all__ = [
    "__version__",
    # Client
    "EtcdClient",
    "connect",
    # Configuration
    "ClientConfig",
    "load_config",
    # Options
    "GetOptions",
    "PutOptions",
    "CasOptions",
    "DeleteOptions",
    # Results and types
    "CasResult",
    "Envelope",
    "ResponseMetadata",
    "Node",
    "node_to_value",
    "encode_key",
    "key_segments",
    # Ephemeral server
    "EphemeralEtcd",
    "EphemeralServerError",
    "create_ephemeral",
    # Errors
    "EtcdError",
    "InvalidArgumentError",
    "InvalidKeyTypeError",
    "ResponseParseError",
    "MissingBodyError",
    "InvalidJsonResponseError",
    "StoreError",
    "KeyNotFoundError",
    "CompareFailedError",
    "NotAFileError",
    "NotADirError",
    "NodeExistsError",
    "DirectoryNotEmptyError",
    "SwapRetryExhaustedError",
]
