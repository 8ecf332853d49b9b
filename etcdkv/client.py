"""etcdkv client implementation."""

from typing import Any, Callable, Optional

import httpx

from etcdkv._internal.retry import Sleep, SwapRetryPolicy
from etcdkv._internal.transport import Transport
from etcdkv.codec import Key, Value, format_value, key_url
from etcdkv.envelope import Envelope
from etcdkv.errors import CompareFailedError, InvalidArgumentError, StoreError
from etcdkv.node import ProjectedValue, node_to_value
from etcdkv.types import (
    CONFLICTED,
    DEFAULT_SWAP_RETRY_DELAY_MS,
    DEFAULT_TIMEOUT_MS,
    CasOptions,
    CasResult,
    ClientConfig,
    DeleteOptions,
    GetOptions,
    PutOptions,
)


class EtcdClient:
    """Async client for the etcd v2 keys API.

    Example:
        >>> async with connect("http://127.0.0.1:2379") as etcd:
        ...     await etcd.reset(["cats", "mittens"], "the cat")
        ...     await etcd.get("cats")
        {'mittens': 'the cat'}
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[Sleep] = None,
    ):
        """Initialize the client.

        Args:
            config: Client configuration
            transport: Optional httpx transport to send requests through
            sleep: Optional async sleep used between swap retries
        """
        if not config.endpoint:
            raise InvalidArgumentError("An endpoint URI is required")
        if config.timeout <= 0:
            raise InvalidArgumentError("timeout must be greater than 0")
        if config.swap_retry_delay < 0:
            raise InvalidArgumentError("swap_retry_delay cannot be negative")

        self._config = config
        self._transport = Transport(timeout=config.timeout, transport=transport)
        self._swap_policy = SwapRetryPolicy(config.swap_retry_delay, sleep=sleep)

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def connect(self) -> None:
        """Open the HTTP session.

        This is called automatically when using the client as a context manager.
        """
        self._transport.open()

    async def close(self) -> None:
        """Close the HTTP session."""
        await self._transport.close()

    async def __aenter__(self) -> "EtcdClient":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        """Async context manager exit."""
        await self.close()

    def is_connected(self) -> bool:
        """Check if the client has an open session."""
        return self._transport.is_open()

    def key_url(self, key: Key) -> str:
        """The URL for a particular key."""
        return key_url(self._config.base_url, key)

    async def get_raw(self, key: Key, options: Optional[GetOptions] = None) -> Envelope:
        """Read a key and return the full store response.

        Args:
            key: The key to read
            options: Optional get options (recursive, sorted, ...)

        Returns:
            Envelope with the node as sent by the store

        Raises:
            KeyNotFoundError: If the key does not exist
        """
        opts = options or GetOptions()
        return await self._transport.request(
            "GET", self.key_url(key), opts.to_params(), opts.timeout
        )

    async def get(
        self, key: Key, options: Optional[GetOptions] = None
    ) -> ProjectedValue:
        """Get the current value of a key.

        Leaves read as their string value. Directories read as a dict of
        child names to values; child directories are None unless
        ``recursive`` is set, in which case they nest.

        Args:
            key: The key to read
            options: Optional get options

        Returns:
            The projected value, or None if the key doesn't exist
        """
        try:
            envelope = await self.get_raw(key, options)
        except StoreError as e:
            if e.status == 404:
                return None
            raise
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise

        node = envelope.node
        return node_to_value(node) if node is not None else None

    async def reset(
        self, key: Key, value: Value, options: Optional[PutOptions] = None
    ) -> Envelope:
        """Set the value of a key unconditionally.

        Args:
            key: The key to write
            value: The new value (stored as a string)
            options: Optional put options (ttl)

        Returns:
            Store response; ``prev_node`` holds the replaced node, if any
        """
        opts = options or PutOptions()
        params = opts.to_params()
        params["value"] = format_value(value)
        return await self._transport.request(
            "PUT", self.key_url(key), params, opts.timeout
        )

    async def mkdir(self, key: Key, options: Optional[PutOptions] = None) -> Envelope:
        """Create a directory.

        Raises:
            NotAFileError: If something already exists at the key
        """
        opts = options or PutOptions()
        params = opts.to_params()
        params["dir"] = "true"
        return await self._transport.request(
            "PUT", self.key_url(key), params, opts.timeout
        )

    async def create_raw(
        self, key: Key, value: Value, options: Optional[PutOptions] = None
    ) -> Envelope:
        """Create an automatically named node under a directory.

        Returns:
            Store response for the created node
        """
        opts = options or PutOptions()
        params = opts.to_params()
        params["value"] = format_value(value)
        return await self._transport.request(
            "POST", self.key_url(key), params, opts.timeout
        )

    async def create(
        self, key: Key, value: Value, options: Optional[PutOptions] = None
    ) -> str:
        """Create an automatically named node under a directory.

        Args:
            key: The directory to create under
            value: The value of the new node
            options: Optional put options (ttl)

        Returns:
            The full key the store assigned, e.g. ``"/queue/00000000000000000042"``
        """
        envelope = await self.create_raw(key, value, options)
        return envelope.node.key

    async def delete(
        self, key: Key, options: Optional[DeleteOptions] = None
    ) -> Envelope:
        """Delete a key.

        Args:
            key: The key to delete
            options: Optional delete options (dir, recursive)

        Returns:
            Store response; ``prev_node`` holds the deleted node

        Raises:
            KeyNotFoundError: If the key does not exist
            NotAFileError: If the key is a directory and ``dir`` is not set
        """
        opts = options or DeleteOptions()
        return await self._transport.request(
            "DELETE", self.key_url(key), opts.to_params(), opts.timeout
        )

    async def delete_all(self, key: Key = None, timeout: Optional[int] = None) -> None:
        """Delete every node under a directory, recursing into subdirectories.

        The directory itself is kept.

        Args:
            key: The directory to empty; the root by default
            timeout: Optional per-request timeout in milliseconds
        """
        envelope = await self.get_raw(key, GetOptions(timeout=timeout))
        for child in envelope.node.children():
            await self.delete(
                child.key,
                DeleteOptions(
                    recursive=True if child.is_dir else None,
                    dir=True if child.is_dir else None,
                    timeout=timeout,
                ),
            )

    async def cas(
        self,
        key: Key,
        value: Value,
        new_value: Value,
        options: Optional[CasOptions] = None,
    ) -> CasResult:
        """Compare and set based on the current value.

        Updates ``key`` to ``new_value`` iff its current value is ``value``.
        ``options`` may additionally constrain the previous index and/or the
        existence of the key.

        Args:
            key: The key to update
            value: Expected current value
            new_value: Value to set
            options: Optional CAS options (prev_index, prev_exist, ttl)

        Returns:
            Applied CasResult, or a conflicted one if the compare failed

        Raises:
            KeyNotFoundError: If the key does not exist
            StoreError: For any store error other than a failed compare
        """
        opts = options or CasOptions()
        params = opts.to_params()
        params["prevValue"] = format_value(value)
        params["value"] = format_value(new_value)
        return await self._compare_and_swap(key, params, opts.timeout)

    async def cas_index(
        self,
        key: Key,
        index: int,
        new_value: Value,
        options: Optional[CasOptions] = None,
    ) -> CasResult:
        """Compare and set based on the current modification index.

        Updates ``key`` to ``new_value`` iff its modifiedIndex is ``index``.
        ``options`` may additionally constrain the previous value and/or the
        existence of the key.

        Args:
            key: The key to update
            index: Expected modifiedIndex
            new_value: Value to set
            options: Optional CAS options (prev_value, prev_exist, ttl)

        Returns:
            Applied CasResult, or a conflicted one if the compare failed
        """
        opts = options or CasOptions()
        params = opts.to_params()
        params["prevIndex"] = str(index)
        params["value"] = format_value(new_value)
        return await self._compare_and_swap(key, params, opts.timeout)

    async def swap(
        self,
        key: Key,
        f: Callable[..., Value],
        *args: Any,
        max_attempts: Optional[int] = None,
    ) -> Value:
        """Atomically update a key to ``f(old_value, *args)``.

        Reads the key, computes the new value, and writes it with a CAS on
        the node's modifiedIndex. If another writer got there first, waits
        about ``swap_retry_delay`` ms and starts over. Retries are unbounded
        unless ``max_attempts`` is given.

        Args:
            key: The key to update
            f: Function from the current value (a string, or None) and
                ``args`` to the new value
            *args: Extra arguments for ``f``
            max_attempts: Optional limit on the number of attempts

        Returns:
            The value that was successfully set, as returned by ``f``

        Raises:
            SwapRetryExhaustedError: If ``max_attempts`` attempts all conflicted
            KeyNotFoundError: If the key does not exist
        """
        if max_attempts is not None and max_attempts <= 0:
            raise InvalidArgumentError("max_attempts must be greater than 0")

        async def attempt():
            node = (await self.get_raw(key)).node
            new_value = f(node.value, *args)
            result = await self.cas_index(key, node.modified_index, new_value)
            return result, new_value

        return await self._swap_policy.execute(
            attempt, key=key, max_attempts=max_attempts
        )

    async def _compare_and_swap(
        self, key: Key, params: dict, timeout: Optional[int]
    ) -> CasResult:
        try:
            envelope = await self._transport.request(
                "PUT", self.key_url(key), params, timeout
            )
        except CompareFailedError:
            return CONFLICTED
        return CasResult(envelope)


def connect(
    endpoint: str,
    timeout: int = DEFAULT_TIMEOUT_MS,
    swap_retry_delay: int = DEFAULT_SWAP_RETRY_DELAY_MS,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    sleep: Optional[Sleep] = None,
) -> EtcdClient:
    """Create a client for the given server URI.

    Example:
        >>> etcd = connect("http://127.0.0.1:2379", timeout=5000)
        >>> async with etcd:
        ...     await etcd.get("foo")

    Args:
        endpoint: Server URI
        timeout: Request timeout in milliseconds
        swap_retry_delay: Roughly how long to wait between swap retries, in ms
        transport: Optional httpx transport to send requests through
        sleep: Optional async sleep used between swap retries

    Returns:
        An EtcdClient; use it as an async context manager or call connect()
    """
    config = ClientConfig(
        endpoint=endpoint, timeout=timeout, swap_retry_delay=swap_retry_delay
    )
    return EtcdClient(config, transport=transport, sleep=sleep)
