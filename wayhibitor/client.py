"""A minimal Wayland client connection."""

from __future__ import annotations

import os
import socket
from collections.abc import Callable, Mapping

from .protocol import WL_DISPLAY, WL_REGISTRY, Interface
from .wire import (
    WireError,
    encode_message,
    pack_string,
    pack_uint,
    split_messages,
    unpack_string,
    unpack_uint,
)

DISPLAY_ID = 1
_EVENT_ERROR = WL_DISPLAY.events.index("error")
_EVENT_DELETE_ID = WL_DISPLAY.events.index("delete_id")

EventHandler = Callable[[int, bytes], None]


class DisplayError(Exception):
    """Raised when the connection to the compositor fails."""


def socket_path(environ: Mapping[str, str] | None = None) -> str:
    """The path of the compositor socket named by the environment."""
    if environ is None:
        environ = os.environ
    name = environ.get("WAYLAND_DISPLAY") or "wayland-0"
    if os.path.isabs(name):
        return name
    runtime_dir = environ.get("XDG_RUNTIME_DIR")
    if not runtime_dir:
        raise DisplayError("XDG_RUNTIME_DIR is not set")
    return os.path.join(runtime_dir, name)


def connect(path: str | None = None) -> Display:
    """Connect to the compositor at path, or the one the environment names."""
    if path is None:
        fd = os.environ.pop("WAYLAND_SOCKET", None)
        if fd is not None:
            try:
                return Display(socket.socket(fileno=int(fd)))
            except (ValueError, OSError) as exc:
                raise DisplayError(f"invalid WAYLAND_SOCKET {fd!r}") from exc
        path = socket_path()
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.connect(path)
    except OSError as exc:
        sock.close()
        raise DisplayError(f"cannot connect to {path}: {exc}") from exc
    return Display(sock)


class Display:
    """A client connection: allocates object ids, sends requests, dispatches events."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._next_id = DISPLAY_ID + 1
        self._handlers: dict[int, EventHandler] = {}
        self._buffer = b""
        self.closed = False

    def __enter__(self) -> Display:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def new_id(self) -> int:
        object_id = self._next_id
        self._next_id += 1
        return object_id

    def send(self, object_id: int, interface: Interface, request: str, payload: bytes = b"") -> None:
        data = encode_message(object_id, interface.opcode(request), payload)
        try:
            self._sock.sendall(data)
        except OSError as exc:
            raise DisplayError(f"failed to send {interface.name}.{request}: {exc}") from exc
        if interface.request(request).destructor:
            self._handlers.pop(object_id, None)

    def on_event(self, object_id: int, handler: EventHandler) -> None:
        """Call handler(opcode, payload) for every event sent to object_id."""
        self._handlers[object_id] = handler

    def get_registry(self) -> int:
        registry_id = self.new_id()
        self.send(DISPLAY_ID, WL_DISPLAY, "get_registry", pack_uint(registry_id))
        return registry_id

    def bind(self, registry_id: int, name: int, interface: Interface, version: int) -> int:
        """Bind the global called name; return the id of the new object."""
        object_id = self.new_id()
        payload = (
            pack_uint(name) + pack_string(interface.name) + pack_uint(version) + pack_uint(object_id)
        )
        self.send(registry_id, WL_REGISTRY, "bind", payload)
        return object_id

    def dispatch(self) -> int:
        """Wait for events and deliver them; return how many were delivered."""
        while True:
            try:
                messages, self._buffer = split_messages(self._buffer)
            except WireError as exc:
                raise DisplayError(f"malformed event: {exc}") from exc
            if messages:
                break
            try:
                chunk = self._sock.recv(4096)
            except OSError as exc:
                raise DisplayError(f"failed to read from compositor: {exc}") from exc
            if not chunk:
                raise DisplayError("connection closed by the compositor")
            self._buffer += chunk
        for message in messages:
            self._deliver(message.object_id, message.opcode, message.payload)
        return len(messages)

    def _deliver(self, object_id: int, opcode: int, payload: bytes) -> None:
        if object_id == DISPLAY_ID:
            try:
                if opcode == _EVENT_ERROR:
                    target, offset = unpack_uint(payload, 0)
                    code, offset = unpack_uint(payload, offset)
                    text, _ = unpack_string(payload, offset)
                    raise DisplayError(f"protocol error {code} on object {target}: {text}")
                if opcode == _EVENT_DELETE_ID:
                    deleted, _ = unpack_uint(payload, 0)
                    self._handlers.pop(deleted, None)
            except WireError as exc:
                raise DisplayError(f"malformed display event: {exc}") from exc
            return
        handler = self._handlers.get(object_id)
        if handler is not None:
            handler(opcode, payload)

    def roundtrip(self) -> None:
        """Block until the compositor has handled every request sent so far."""
        callback_id = self.new_id()
        done: list[bool] = []
        self.on_event(callback_id, lambda opcode, payload: done.append(True))
        self.send(DISPLAY_ID, WL_DISPLAY, "sync", pack_uint(callback_id))
        while not done:
            self.dispatch()

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._handlers.clear()
            self._sock.close()