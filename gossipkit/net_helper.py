"""UDP transport between peers identified by an IPv4 address and a port."""

from __future__ import annotations

import functools
import select
import socket
import struct
from typing import Any, Sequence

FRAGMENT_SIZE = 60 * 1024
"""Largest payload carried by one datagram; longer messages are split."""

DUMP_SIZE = 16
"""Size in bytes of a serialised node identifier."""

TIMEOUT = 0
DATA = 1
USER_FDS = 2

_AF_INET_TAG = 2
# family (little endian), port (network order), address, padding
_SOCKADDR = struct.Struct("<H2s4s8x")

_MORE_FRAGMENTS = 0
_LAST_FRAGMENT = 1


class NetHelperError(Exception):
    """Raised when an address is invalid or a socket operation fails."""


@functools.total_ordering
class NodeID:
    """An IPv4 address and UDP port identifying a peer."""

    __slots__ = ("_addr", "_port")

    def __init__(self, ip: str, port: int) -> None:
        try:
            self._addr = socket.inet_aton(ip)
        except (OSError, TypeError) as exc:
            raise NetHelperError(f"invalid IPv4 address: {ip!r}") from exc
        if not 0 <= port <= 0xFFFF:
            raise NetHelperError(f"invalid port: {port}")
        self._port = port

    @property
    def ip(self) -> str:
        """The address in dotted quad notation."""
        return socket.inet_ntoa(self._addr)

    @property
    def port(self) -> int:
        """The UDP port."""
        return self._port

    def dump(self) -> bytes:
        """Serialise the identifier into :data:`DUMP_SIZE` bytes."""
        return _SOCKADDR.pack(_AF_INET_TAG, self._port.to_bytes(2, "big"), self._addr)

    @classmethod
    def undump(cls, data: bytes) -> "NodeID":
        """Read an identifier from the first :data:`DUMP_SIZE` bytes of ``data``."""
        if len(data) < DUMP_SIZE:
            raise NetHelperError(
                f"need {DUMP_SIZE} bytes to read a node, got {len(data)}"
            )
        _, port, addr = _SOCKADDR.unpack_from(data)
        return cls(socket.inet_ntoa(addr), int.from_bytes(port, "big"))

    def _key(self) -> tuple[int, bytes]:
        return self._port, self._addr

    def __str__(self) -> str:
        return f"{self.ip}:{self._port}"

    def __repr__(self) -> str:
        return f"NodeID({self.ip!r}, {self._port})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NodeID):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, NodeID):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())


def create_node(ip: str, port: int) -> NodeID:
    """Build the identifier of a remote peer."""
    return NodeID(ip, port)


class NetHelper:
    """A bound UDP socket that exchanges possibly fragmented messages."""

    def __init__(self, address: str, port: int, config: str | None = None) -> None:
        requested = NodeID(address, port)
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.bind((requested.ip, requested.port))
        except OSError as exc:
            sock.close()
            raise NetHelperError(f"cannot bind to {requested}: {exc}") from exc
        bound_ip, bound_port = sock.getsockname()
        self._sock = sock
        self._node = NodeID(bound_ip, bound_port)
        self._msg_types: set[int] = set()

    @property
    def node(self) -> NodeID:
        """The identifier of the local endpoint."""
        return self._node

    def fileno(self) -> int:
        """The file descriptor of the socket."""
        return self._sock.fileno()

    def bind_msg_type(self, msgtype: int) -> None:
        """Register ``msgtype``; every type is delivered regardless."""
        if not 0 <= msgtype <= 0xFF:
            raise ValueError(f"message type out of range: {msgtype}")
        self._msg_types.add(msgtype)

    def send_to_peer(self, to: NodeID, data: bytes) -> int:
        """Send ``data`` to ``to``, split into fragments of :data:`FRAGMENT_SIZE`.

        Returns the size of the last datagram written, header byte included.
        """
        payload = memoryview(bytes(data))
        destination = (to.ip, to.port)
        offset = 0
        while True:
            chunk = payload[offset:offset + FRAGMENT_SIZE]
            offset += len(chunk)
            last = offset >= len(payload)
            header = _LAST_FRAGMENT if last else _MORE_FRAGMENTS
            try:
                sent = self._sock.sendto(bytes([header]) + chunk, destination)
            except OSError as exc:
                raise NetHelperError(f"cannot send to {to}: {exc}") from exc
            if last:
                return sent

    def recv_from_peer(self, max_size: int) -> tuple[NodeID, bytes]:
        """Receive one message of at most ``max_size`` bytes and its sender."""
        if max_size < 0:
            raise ValueError("max_size must not be negative")
        parts: list[bytes] = []
        remaining = max_size
        while True:
            length = min(remaining, FRAGMENT_SIZE)
            remaining -= length
            try:
                packet, sender = self._sock.recvfrom(length + 1)
            except OSError as exc:
                raise NetHelperError(f"receive failed: {exc}") from exc
            parts.append(packet[1:])
            if not packet or packet[0] != _MORE_FRAGMENTS or remaining <= 0:
                break
        return NodeID(sender[0], sender[1]), b"".join(parts)

    def wait_for_data(
        self, timeout: float | None = None, fds: Sequence[Any] = ()
    ) -> tuple[int, list[Any]]:
        """Wait until the socket or one of ``fds`` is readable.

        Returns ``(TIMEOUT, [])`` when ``timeout`` seconds pass, ``(DATA, [])``
        when a message is waiting on the socket, and ``(USER_FDS, ready)``
        with the readable members of ``fds`` otherwise.
        """
        watched = [self._sock, *fds]
        try:
            ready, _, _ = select.select(watched, [], [], timeout)
        except (OSError, ValueError) as exc:
            raise NetHelperError(f"wait failed: {exc}") from exc
        if not ready:
            return TIMEOUT, []
        if self._sock in ready:
            return DATA, []
        return USER_FDS, [fd for fd in fds if fd in ready]

    def close(self) -> None:
        """Close the socket."""
        self._sock.close()

    def __enter__(self) -> "NetHelper":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()