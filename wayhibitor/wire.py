"""Encoding and decoding of Wayland wire-protocol messages."""

from __future__ import annotations

import struct
from dataclasses import dataclass

HEADER_SIZE = 8
MAX_MESSAGE_SIZE = 0xFFFF
_UINT = struct.Struct("=I")


class WireError(ValueError):
    """Raised for data that does not follow the wire format."""


@dataclass(frozen=True)
class Message:
    """One message: the object it targets, its opcode and its argument bytes."""

    object_id: int
    opcode: int
    payload: bytes = b""

    def encode(self) -> bytes:
        return encode_message(self.object_id, self.opcode, self.payload)


def _padding(length: int) -> int:
    return -length % 4


def pack_uint(value: int) -> bytes:
    """Encode a 32-bit unsigned integer in host byte order."""
    if not 0 <= value <= 0xFFFFFFFF:
        raise WireError(f"{value} does not fit in 32 unsigned bits")
    return _UINT.pack(value)


def pack_string(text: str | None) -> bytes:
    """Encode a string as length, UTF-8 bytes, NUL and padding; None is the null string."""
    if text is None:
        return pack_uint(0)
    raw = text.encode("utf-8")
    if b"\0" in raw:
        raise WireError("string contains a NUL byte")
    raw += b"\0"
    return pack_uint(len(raw)) + raw + b"\0" * _padding(len(raw))


def unpack_uint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode an unsigned integer at offset; return it with the offset after it."""
    end = offset + _UINT.size
    if offset < 0 or end > len(data):
        raise WireError("truncated unsigned integer")
    return _UINT.unpack_from(data, offset)[0], end


def unpack_string(data: bytes, offset: int = 0) -> tuple[str | None, int]:
    """Decode a string at offset; return it (or None) with the offset after it."""
    length, offset = unpack_uint(data, offset)
    if length == 0:
        return None, offset
    end = offset + length
    padded_end = end + _padding(length)
    if padded_end > len(data):
        raise WireError("truncated string")
    raw = bytes(data[offset:end])
    if raw[-1] != 0:
        raise WireError("string is not NUL-terminated")
    try:
        text = raw[:-1].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise WireError("string is not valid UTF-8") from exc
    return text, padded_end


def encode_message(object_id: int, opcode: int, payload: bytes = b"") -> bytes:
    """Build a complete message: header followed by the payload."""
    if len(payload) % 4:
        raise WireError("payload length must be a multiple of four")
    if not 0 <= opcode <= 0xFFFF:
        raise WireError(f"opcode {opcode} out of range")
    size = HEADER_SIZE + len(payload)
    if size > MAX_MESSAGE_SIZE:
        raise WireError(f"message of {size} bytes is too large")
    return pack_uint(object_id) + pack_uint(size << 16 | opcode) + bytes(payload)


def split_messages(buffer: bytes) -> tuple[list[Message], bytes]:
    """Cut every complete message off the front of buffer; return them and the rest."""
    data = bytes(buffer)
    messages: list[Message] = []
    offset = 0
    while len(data) - offset >= HEADER_SIZE:
        object_id, _ = unpack_uint(data, offset)
        word, _ = unpack_uint(data, offset + 4)
        size, opcode = word >> 16, word & 0xFFFF
        if size < HEADER_SIZE or size % 4:
            raise WireError(f"invalid message size {size}")
        if len(data) - offset < size:
            break
        messages.append(Message(object_id, opcode, data[offset + HEADER_SIZE:offset + size]))
        offset += size
    return messages, data[offset:]