"""Peer sampling front end and the file based dummy sampler."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, NoReturn, Protocol

from .config import Config
from .net_helper import NetHelperError, NodeID, create_node

log = logging.getLogger(__name__)

MAX_PEERS = 5000
"""Size of the dummy sampler's table; one slot is always kept free."""

DEFAULT_PROTOCOL = "ncast"
PEERS_FILE = "peers.txt"


class PeerSamplerError(Exception):
    """Raised when a sampler cannot be built or an operation is unsupported."""


class SamplerProtocol(Protocol):
    """Operations every peer sampling protocol provides."""

    def change_metadata(self, metadata: bytes) -> None: ...

    def add_neighbour(self, node: NodeID, metadata: bytes) -> int: ...

    def parse_data(self, data: bytes) -> None: ...

    def neighbourhood(self) -> list[NodeID]: ...

    def metadata(self) -> list[bytes]: ...

    def grow_neighbourhood(self, n: int) -> int: ...

    def shrink_neighbourhood(self, n: int) -> int: ...

    def remove_neighbour(self, node: NodeID) -> int: ...


SamplerFactory = Callable[[NodeID, bytes, "str | None"], SamplerProtocol]


def load_peers(path: str | Path) -> list[NodeID]:
    """Read ``address port`` lines from ``path``; blank lines are skipped."""
    try:
        text = Path(path).read_text()
    except OSError as exc:
        raise PeerSamplerError(f"cannot read peers file {path}: {exc}") from exc
    nodes: list[NodeID] = []
    for lineno, line in enumerate(text.splitlines(), 1):
        fields = line.split()
        if not fields:
            continue
        if len(fields) != 2:
            raise PeerSamplerError(f"{path}:{lineno}: expected 'address port'")
        addr, port_text = fields
        try:
            port = int(port_text)
        except ValueError as exc:
            raise PeerSamplerError(f"{path}:{lineno}: bad port {port_text!r}") from exc
        if len(nodes) >= MAX_PEERS - 1:
            break
        try:
            nodes.append(create_node(addr, port))
        except NetHelperError as exc:
            raise PeerSamplerError(f"{path}:{lineno}: {exc}") from exc
    return nodes


class DummySampler:
    """A fixed neighbourhood read from a file, extended by hand."""

    def __init__(
        self,
        node: NodeID,
        metadata: bytes = b"",
        config: str | None = None,
        peers_file: str | Path = PEERS_FILE,
    ) -> None:
        self._node = node
        self._table = load_peers(peers_file)

    def _unsupported(self, operation: str) -> NoReturn:
        raise PeerSamplerError(
            f"the dummy sampler of {self._node} does not support {operation}"
        )

    @staticmethod
    def _check_count(n: int) -> None:
        if not isinstance(n, int):
            raise TypeError(f"neighbourhood change must be an int, got {n!r}")

    def change_metadata(self, metadata: bytes) -> None:
        """Always fails: the dummy sampler keeps no metadata."""
        self._unsupported(f"metadata ({len(bytes(metadata))} bytes given)")

    def add_neighbour(self, node: NodeID, metadata: bytes = b"") -> int:
        """Append ``node``; return the number of neighbours."""
        if len(self._table) >= MAX_PEERS - 1:
            raise PeerSamplerError("dummy sampler table is full")
        self._table.append(node)
        return len(self._table)

    def parse_data(self, data: bytes) -> None:
        """Accept a message; the dummy sampler ignores its content."""
        memoryview(data)

    def neighbourhood(self) -> list[NodeID]:
        """The known neighbours, in the order they were added."""
        return list(self._table)

    def metadata(self) -> list[bytes]:
        """Always fails: the dummy sampler keeps no metadata."""
        self._unsupported("metadata")

    def grow_neighbourhood(self, n: int) -> int:
        """Always fails: the neighbourhood size is fixed."""
        self._check_count(n)
        self._unsupported("resizing")

    def shrink_neighbourhood(self, n: int) -> int:
        """Always fails: the neighbourhood size is fixed."""
        self._check_count(n)
        self._unsupported("resizing")

    def remove_neighbour(self, node: NodeID) -> int:
        """Always fails: neighbours cannot be removed."""
        self._unsupported(f"removing neighbours ({node})")


_PROTOCOLS: dict[str, SamplerFactory] = {"dummy": DummySampler}


def register_protocol(name: str, factory: SamplerFactory) -> None:
    """Make ``factory`` available under the ``protocol`` configuration tag."""
    if not isinstance(name, str) or not name:
        raise ValueError("protocol name must be a non-empty string")
    if not callable(factory):
        raise TypeError("protocol factory must be callable")
    _PROTOCOLS[name] = factory


class PeerSampler:
    """Peer sampler choosing its protocol from the ``protocol`` tag."""

    def __init__(
        self, node: NodeID, metadata: bytes = b"", config: str | None = None
    ) -> None:
        name = Config.parse(config).get_str("protocol", DEFAULT_PROTOCOL)
        factory = _PROTOCOLS.get(name)
        if factory is None:
            raise PeerSamplerError(f"unknown peer sampling protocol: {name}")
        self._sampler: SamplerProtocol = factory(node, metadata, config)

    def change_metadata(self, metadata: bytes) -> None:
        self._sampler.change_metadata(metadata)

    def add_peer(self, node: NodeID, metadata: bytes = b"") -> int:
        return self._sampler.add_neighbour(node, metadata)

    def parse_data(self, data: bytes) -> None:
        self._sampler.parse_data(data)

    def cache(self) -> list[NodeID]:
        """The current neighbourhood."""
        return self._sampler.neighbourhood()

    def metadata(self) -> list[bytes]:
        return self._sampler.metadata()

    def grow_cache(self, n: int) -> int:
        return self._sampler.grow_neighbourhood(n)

    def shrink_cache(self, n: int) -> int:
        return self._sampler.shrink_neighbourhood(n)

    def remove_peer(self, node: NodeID) -> int:
        return self._sampler.remove_neighbour(node)