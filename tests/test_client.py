import socket
import threading

import pytest

from wayhibitor.client import Display, DisplayError, connect, socket_path
from wayhibitor.protocol import WL_DISPLAY, ZWP_IDLE_INHIBIT_MANAGER_V1, ZWP_IDLE_INHIBITOR_V1
from wayhibitor.wire import (
    Message,
    encode_message,
    pack_string,
    pack_uint,
    split_messages,
    unpack_string,
    unpack_uint,
)


@pytest.fixture
def pair():
    client, server = socket.socketpair()
    client.settimeout(5)
    server.settimeout(5)
    display = Display(client)
    yield display, server
    display.close()
    server.close()


def _receive(sock, count):
    buffer = b""
    messages = []
    while len(messages) < count:
        chunk = sock.recv(4096)
        assert chunk
        found, buffer = split_messages(buffer + chunk)
        messages.extend(found)
    return messages


def test_socket_path_relative():
    assert socket_path({"XDG_RUNTIME_DIR": "/run/user/1000", "WAYLAND_DISPLAY": "wayland-1"}) == (
        "/run/user/1000/wayland-1"
    )


def test_socket_path_absolute():
    assert socket_path({"WAYLAND_DISPLAY": "/tmp/wl.sock"}) == "/tmp/wl.sock"


def test_socket_path_default_name():
    assert socket_path({"XDG_RUNTIME_DIR": "/run/x"}) == "/run/x/wayland-0"


def test_socket_path_without_runtime_dir():
    with pytest.raises(DisplayError):
        socket_path({"WAYLAND_DISPLAY": "wayland-1"})


def test_connect_missing_socket(tmp_path):
    with pytest.raises(DisplayError):
        connect(str(tmp_path / "absent"))


def test_connect_to_listener(tmp_path):
    path = str(tmp_path / "wl")
    with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as listener:
        listener.bind(path)
        listener.listen(1)
        with connect(path) as display:
            registry = display.get_registry()
            conn, _ = listener.accept()
            with conn:
                conn.settimeout(5)
                assert _receive(conn, 1) == [
                    Message(1, WL_DISPLAY.opcode("get_registry"), pack_uint(registry))
                ]


def test_new_ids_increase(pair):
    display, _ = pair
    ids = [display.new_id() for _ in range(5)]
    assert ids == sorted(set(ids))
    assert min(ids) > 1


def test_get_registry_request(pair):
    display, server = pair
    registry = display.get_registry()
    assert _receive(server, 1) == [
        Message(1, WL_DISPLAY.opcode("get_registry"), pack_uint(registry))
    ]


def test_bind_payload(pair):
    display, server = pair
    registry = display.get_registry()
    bound = display.bind(registry, 7, ZWP_IDLE_INHIBIT_MANAGER_V1, 1)
    message = _receive(server, 2)[1]
    assert (message.object_id, message.opcode) == (registry, 0)
    name, offset = unpack_uint(message.payload, 0)
    iface, offset = unpack_string(message.payload, offset)
    version, offset = unpack_uint(message.payload, offset)
    new_id, offset = unpack_uint(message.payload, offset)
    assert (name, iface, version, new_id) == (7, "zwp_idle_inhibit_manager_v1", 1, bound)
    assert offset == len(message.payload)


def test_event_reaches_handler(pair):
    display, server = pair
    target = display.new_id()
    seen = []
    display.on_event(target, lambda opcode, payload: seen.append((opcode, payload)))
    server.sendall(encode_message(target, 3, pack_uint(9)))
    assert display.dispatch() == 1
    assert seen == [(3, pack_uint(9))]


def test_protocol_error_raises(pair):
    display, server = pair
    payload = pack_uint(3) + pack_uint(2) + pack_string("invalid object")
    server.sendall(encode_message(1, 0, payload))
    with pytest.raises(DisplayError, match="invalid object"):
        display.dispatch()


def test_delete_id_drops_handler(pair):
    display, server = pair
    target = display.new_id()
    seen = []
    display.on_event(target, lambda opcode, payload: seen.append(opcode))
    server.sendall(encode_message(1, 1, pack_uint(target)) + encode_message(target, 0))
    assert display.dispatch() == 2
    assert seen == []


def test_destructor_request_drops_handler(pair):
    display, server = pair
    target = display.new_id()
    seen = []
    display.on_event(target, lambda opcode, payload: seen.append(opcode))
    display.send(target, ZWP_IDLE_INHIBITOR_V1, "destroy")
    assert _receive(server, 1) == [Message(target, 0)]
    server.sendall(encode_message(target, 0))
    assert display.dispatch() == 1
    assert seen == []


def test_dispatch_after_hangup(pair):
    display, server = pair
    server.close()
    with pytest.raises(DisplayError):
        display.dispatch()


def test_roundtrip(pair):
    display, server = pair
    requests = []

    def answer():
        message = _receive(server, 1)[0]
        requests.append(message)
        callback, _ = unpack_uint(message.payload, 0)
        server.sendall(encode_message(callback, 0, pack_uint(0)))

    thread = threading.Thread(target=answer)
    thread.start()
    display.roundtrip()
    thread.join(5)
    assert [(m.object_id, m.opcode) for m in requests] == [(1, WL_DISPLAY.opcode("sync"))]


def test_send_after_close(pair):
    display, _ = pair
    display.close()
    display.close()
    assert display.closed
    with pytest.raises(DisplayError):
        display.get_registry()