"""Ephemeral single-node etcd instance for testing and development.

This module spawns a temporary ``etcd`` process with the v2 keys API enabled,
bound to free local ports, and storing its data in a temporary directory
that is removed when the server stops. etcd releases up to 3.5 serve the v2
API when started with ``enable-v2``.

Example:
    >>> import asyncio
    >>> from etcdkv import create_ephemeral
    >>>
    >>> async def main():
    ...     async with create_ephemeral() as server:
    ...         async with server.get_client() as etcd:
    ...             await etcd.reset("key", "value")
    ...             print(await etcd.get("key"))
    >>>
    >>> asyncio.run(main())
"""

import asyncio
import logging
import os
import shutil
import socket
import subprocess
import tempfile
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

import httpx
import yaml

from etcdkv.client import EtcdClient
from etcdkv.errors import EtcdError
from etcdkv.types import ClientConfig

logger = logging.getLogger(__name__)


class EphemeralServerError(EtcdError):
    """Error related to ephemeral server management."""

    def __init__(self, message: str):
        super().__init__(message, "EPHEMERAL_SERVER")


def _find_free_port() -> int:
    """Find an available port on localhost."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        s.listen(1)
        port = s.getsockname()[1]
    return port


def find_etcd_binary() -> str:
    """Find the etcd binary.

    Searches in the following order:
    1. ETCD_SERVER_PATH environment variable
    2. ``bin/etcd`` next to this package
    3. System PATH

    Returns:
        Path to the etcd binary

    Raises:
        EphemeralServerError: If binary not found
    """
    env_path = os.environ.get("ETCD_SERVER_PATH")
    if env_path and os.path.isfile(env_path) and os.access(env_path, os.X_OK):
        return env_path

    bundled_binary = Path(__file__).parent / "bin" / "etcd"
    if bundled_binary.exists() and os.access(bundled_binary, os.X_OK):
        return str(bundled_binary)

    server_path = shutil.which("etcd")
    if server_path:
        return server_path

    raise EphemeralServerError(
        "etcd binary not found. Please install it or set ETCD_SERVER_PATH.\n"
        "\n"
        "Installation options:\n"
        "  1. Download a release (3.5 or older for the v2 API) from\n"
        "     https://github.com/etcd-io/etcd/releases\n"
        "  2. Set ETCD_SERVER_PATH to point to the binary\n"
        "  3. Add the binary to your system PATH"
    )


class EphemeralEtcd:
    """Manages an ephemeral etcd server process.

    Args:
        client_port: Optional client port. If None, a free port is used.
        peer_port: Optional peer port. If None, a free port is used.
        data_dir: Optional data directory. If None, a temp directory is created.
        server_binary: Optional path to the etcd binary.
        log_file: Optional path to log file. If None, logs go to a temp file.
        startup_timeout: Seconds to wait for the server to become ready.

    Example:
        >>> async def example():
        ...     server = EphemeralEtcd()
        ...     await server.start()
        ...     async with server.get_client() as etcd:
        ...         await etcd.reset("key", "value")
        ...     await server.stop()
    """

    def __init__(
        self,
        client_port: Optional[int] = None,
        peer_port: Optional[int] = None,
        data_dir: Optional[str] = None,
        server_binary: Optional[str] = None,
        log_file: Optional[str] = None,
        startup_timeout: float = 10.0,
    ):
        self.client_port = client_port or _find_free_port()
        self.peer_port = peer_port or _find_free_port()
        self.data_dir = data_dir
        self.server_binary = server_binary
        self.log_file = log_file
        self.startup_timeout = startup_timeout

        self._process: Optional[subprocess.Popen] = None
        self._temp_dir: Optional[str] = None
        self._temp_log: Optional[str] = None
        self._config_file: Optional[str] = None
        self._started = False

    @property
    def endpoint(self) -> str:
        """Client URL of the server."""
        return f"http://127.0.0.1:{self.client_port}"

    async def start(self) -> None:
        """Start the ephemeral server.

        This method:
        1. Creates a temporary directory for data
        2. Writes an etcd YAML configuration file
        3. Spawns the etcd process
        4. Waits for the server to answer on its client URL

        Raises:
            EphemeralServerError: If the server fails to start or become ready
        """
        if self._started:
            raise EphemeralServerError("Server already started")

        binary = self.server_binary or find_etcd_binary()

        if not self.data_dir:
            self._temp_dir = tempfile.mkdtemp(prefix="etcdkv-ephemeral-")
            actual_data_dir = self._temp_dir
        else:
            actual_data_dir = self.data_dir
            os.makedirs(actual_data_dir, exist_ok=True)

        if not self.log_file:
            log_fd, self._temp_log = tempfile.mkstemp(
                prefix="etcdkv-ephemeral-", suffix=".log"
            )
            os.close(log_fd)
            actual_log_file = self._temp_log
        else:
            actual_log_file = self.log_file

        name = f"ephemeral-{uuid.uuid4().hex[:8]}"
        peer_url = f"http://127.0.0.1:{self.peer_port}"
        config = {
            "name": name,
            "data-dir": actual_data_dir,
            "listen-client-urls": self.endpoint,
            "advertise-client-urls": self.endpoint,
            "listen-peer-urls": peer_url,
            "initial-advertise-peer-urls": peer_url,
            "initial-cluster": f"{name}={peer_url}",
            "initial-cluster-state": "new",
            "enable-v2": True,
        }

        config_fd, self._config_file = tempfile.mkstemp(
            prefix="etcdkv-config-", suffix=".yaml"
        )
        with os.fdopen(config_fd, "w") as f:
            yaml.safe_dump(config, f)

        try:
            with open(actual_log_file, "w") as log_f:
                self._process = subprocess.Popen(
                    [binary, "--config-file", self._config_file],
                    stdout=log_f,
                    stderr=subprocess.STDOUT,
                )
        except OSError as e:
            self._cleanup()
            raise EphemeralServerError(f"Failed to start server: {e}") from e

        logger.debug("started etcd pid=%d at %s", self._process.pid, self.endpoint)
        await self._wait_for_ready()

        self._started = True

    async def _wait_for_ready(self) -> None:
        """Poll the server's /version endpoint until it answers.

        Raises:
            EphemeralServerError: If the server doesn't become ready in time
        """
        start_time = time.time()
        last_error: Optional[Exception] = None
        log_path = self.log_file or self._temp_log

        async with httpx.AsyncClient(timeout=1.0) as http:
            while time.time() - start_time < self.startup_timeout:
                if self._process.poll() is not None:
                    returncode = self._process.returncode
                    self._process = None
                    self._cleanup(keep_log=True)
                    raise EphemeralServerError(
                        f"Server process exited with code {returncode}. "
                        f"Check logs at: {log_path}"
                    )

                try:
                    response = await http.get(f"{self.endpoint}/version")
                    if response.status_code == 200:
                        return
                except httpx.TransportError as e:
                    last_error = e

                await asyncio.sleep(0.1)

        self._terminate()
        self._cleanup(keep_log=True)
        raise EphemeralServerError(
            f"Server did not become ready within {self.startup_timeout}s. "
            f"Last error: {last_error}. "
            f"Check logs at: {log_path}"
        )

    def get_client(self, **config) -> EtcdClient:
        """Get a client configured for this server.

        Args:
            **config: Extra ClientConfig fields (timeout, swap_retry_delay)

        Raises:
            EphemeralServerError: If the server is not started
        """
        if not self._started:
            raise EphemeralServerError(
                "Server not started. Call start() first or use as context manager."
            )
        return EtcdClient(ClientConfig(endpoint=self.endpoint, **config))

    async def stop(self) -> None:
        """Stop the ephemeral server and clean up resources.

        Sends SIGTERM, waits up to 5 seconds, then SIGKILL if necessary.
        """
        if not self._started:
            return

        self._terminate()
        self._cleanup()
        self._started = False

    def _terminate(self) -> None:
        if self._process is None:
            return

        self._process.terminate()
        try:
            self._process.wait(timeout=5.0)
        except subprocess.TimeoutExpired:
            self._process.kill()
            self._process.wait()
        self._process = None

    def _cleanup(self, keep_log: bool = False) -> None:
        """Remove temporary files and directories."""
        if self._config_file and os.path.exists(self._config_file):
            os.remove(self._config_file)
        self._config_file = None

        if self._temp_log and os.path.exists(self._temp_log) and not keep_log:
            os.remove(self._temp_log)
        self._temp_log = None

        if self._temp_dir and os.path.exists(self._temp_dir):
            shutil.rmtree(self._temp_dir, ignore_errors=True)
        self._temp_dir = None

    async def __aenter__(self) -> "EphemeralEtcd":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        await self.stop()


@asynccontextmanager
async def create_ephemeral(**kwargs) -> AsyncIterator[EphemeralEtcd]:
    """Create and start an ephemeral etcd server (async context manager).

    Args:
        **kwargs: Arguments passed to the EphemeralEtcd constructor

    Yields:
        EphemeralEtcd instance that is started and ready to use
    """
    server = EphemeralEtcd(**kwargs)

    try:
        await server.start()
        yield server
    finally:
        await server.stop()
