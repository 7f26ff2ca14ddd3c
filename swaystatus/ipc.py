"""Client for the sway IPC protocol over a Unix socket."""

from __future__ import annotations

import json
import logging
import os
import socket
import struct
import subprocess
import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, List, Optional, Union

_LOG = logging.getLogger(__name__)

MAGIC = b"i3-ipc"
_LENGTH_AND_TYPE = struct.Struct("=II")
HEADER_SIZE = len(MAGIC) + _LENGTH_AND_TYPE.size
_CLOSE_MARKER = b"close-sway-ipc"


class IpcError(RuntimeError):
    """Raised when talking to the compositor fails."""


class MessageType(IntEnum):
    """Message and event types of the IPC protocol."""

    COMMAND = 0
    GET_WORKSPACES = 1
    SUBSCRIBE = 2
    GET_OUTPUTS = 3
    GET_TREE = 4
    GET_MARKS = 5
    GET_BAR_CONFIG = 6
    GET_VERSION = 7
    GET_BINDING_MODES = 8
    GET_CONFIG = 9
    SEND_TICK = 10
    GET_INPUTS = 100
    GET_SEATS = 101
    EVENT_WORKSPACE = 0x80000000
    EVENT_MODE = 0x80000002
    EVENT_WINDOW = 0x80000003
    EVENT_BARCONFIG_UPDATE = 0x80000004
    EVENT_BINDING = 0x80000005
    EVENT_SHUTDOWN = 0x80000006
    EVENT_TICK = 0x80000007
    EVENT_BAR_STATE_UPDATE = 0x80000014
    EVENT_INPUT = 0x80000015


@dataclass(frozen=True)
class IpcResponse:
    """A framed message received from the compositor."""

    size: int
    type: int
    payload: str

    def decode(self):
        """Parse the payload as JSON."""
        return json.loads(self.payload)


def get_socket_path() -> str:
    """Return the IPC socket path from SWAYSOCK or from ``sway --get-socketpath``."""
    env = os.environ.get("SWAYSOCK")
    if env is not None:
        return env
    try:
        proc = subprocess.run(
            ["sway", "--get-socketpath"],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise IpcError("Failed to get socket path") from exc
    path = proc.stdout or ""
    if not path:
        raise IpcError("Socket path is empty")
    if path.endswith("\n"):
        path = path[:-1]
    return path


def encode_message(msg_type: int, payload: Union[str, bytes] = "") -> bytes:
    """Frame a message: magic, payload length, type, payload."""
    data = payload.encode("utf-8") if isinstance(payload, str) else bytes(payload)
    return MAGIC + _LENGTH_AND_TYPE.pack(len(data), int(msg_type)) + data


def _recv_exact(sock: socket.socket, size: int, what: str) -> bytes:
    chunks = []
    remaining = size
    while remaining > 0:
        try:
            chunk = sock.recv(remaining)
        except OSError as exc:
            raise IpcError(f"Unable to receive IPC {what}") from exc
        if not chunk:
            raise IpcError(f"Unable to receive IPC {what}")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def read_response(sock: socket.socket) -> IpcResponse:
    """Read one framed message from ``sock``."""
    header = _recv_exact(sock, HEADER_SIZE, "header")
    if header[: len(MAGIC)] != MAGIC:
        raise IpcError("Invalid IPC magic")
    size, msg_type = _LENGTH_AND_TYPE.unpack(header[len(MAGIC):])
    payload = _recv_exact(sock, size, "payload")
    return IpcResponse(size, msg_type, payload.decode("utf-8", errors="replace"))


Handler = Callable[[IpcResponse], None]


class Ipc:
    """Two connections to the compositor: one for commands, one for events."""

    def __init__(self, socket_path: Optional[str] = None):
        path = socket_path if socket_path is not None else get_socket_path()
        self._lock = threading.Lock()
        self._closed = False
        self.cmd_handlers: List[Handler] = []
        self.event_handlers: List[Handler] = []
        self._sock = self._open(path)
        try:
            self._event_sock = self._open(path)
        except IpcError:
            self._sock.close()
            raise

    @staticmethod
    def _open(path: str) -> socket.socket:
        try:
            sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        except OSError as exc:
            raise IpcError("Unable to open Unix socket") from exc
        try:
            sock.connect(path)
        except OSError as exc:
            sock.close()
            raise IpcError("Unable to connect to Sway") from exc
        return sock

    def close(self) -> None:
        """Close both connections."""
        if self._closed:
            return
        self._closed = True
        for sock in (self._sock, self._event_sock):
            try:
                # Sending garbage makes the server drop the connection.
                sock.sendall(_CLOSE_MARKER)
            except OSError:
                pass
            sock.close()

    def __enter__(self) -> "Ipc":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _recv(self, sock: socket.socket) -> IpcResponse:
        try:
            return read_response(sock)
        except IpcError:
            if self._closed:
                return IpcResponse(0, 0, "")
            raise

    def _send(self, sock: socket.socket, msg_type: int, payload) -> IpcResponse:
        try:
            sock.sendall(encode_message(msg_type, payload))
        except OSError as exc:
            raise IpcError("Unable to send IPC message") from exc
        return self._recv(sock)

    def send_cmd(self, msg_type: int, payload: Union[str, bytes] = "") -> IpcResponse:
        """Send a request on the command connection and hand the reply to the handlers."""
        with self._lock:
            response = self._send(self._sock, msg_type, payload)
            for handler in self.cmd_handlers:
                handler(response)
        return response

    def subscribe(self, payload) -> IpcResponse:
        """Subscribe the event connection to the given event names."""
        if not isinstance(payload, (str, bytes)):
            payload = json.dumps(list(payload))
        response = self._send(self._event_sock, MessageType.SUBSCRIBE, payload)
        try:
            data = json.loads(response.payload)
        except ValueError:
            data = None
        if not isinstance(data, dict) or data.get("success") is not True:
            raise IpcError("Unable to subscribe ipc event")
        return response

    def handle_event(self) -> IpcResponse:
        """Wait for one event and hand it to the handlers."""
        response = self._recv(self._event_sock)
        for handler in self.event_handlers:
            handler(response)
        return response