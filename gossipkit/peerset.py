"""A set of peers kept ordered by node identifier."""

from __future__ import annotations

import time
from bisect import bisect_left
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

from .config import Config

SIZE_INCREMENT = 32


@dataclass
class Peer:
    """A neighbour and what is known about it."""

    node: Any
    creation_timestamp: float = field(default_factory=time.time)
    bmap: set[int] = field(default_factory=set)
    bmap_timestamp: float = 0.0
    cb_size: int = 0


def _node_of(peer: Peer) -> Any:
    return peer.node


class PeerSet:
    """Peers sorted by node, at most one per node.

    The ``size`` configuration tag sets the initial capacity, which grows by
    :data:`SIZE_INCREMENT` whenever the set is full.
    """

    def __init__(self, config: str | None = None) -> None:
        cfg = Config.parse(config)
        self._capacity: int = cfg.get_int("size", 0)
        self._peers: list[Peer] = []

    @property
    def capacity(self) -> int:
        """Number of peers the set holds before it grows."""
        return self._capacity

    def _position(self, node: Any) -> int:
        return bisect_left(self._peers, node, key=_node_of)

    def _find(self, node: Any) -> int:
        pos = self._position(node)
        if pos < len(self._peers) and self._peers[pos].node == node:
            return pos
        return -1

    def add_peer(self, node: Any) -> int:
        """Add ``node``; return the new size, or 0 if it is already present."""
        pos = self._position(node)
        if pos < len(self._peers) and self._peers[pos].node == node:
            return 0
        if len(self._peers) >= self._capacity:
            self._capacity += SIZE_INCREMENT
        self._peers.insert(pos, Peer(node))
        return len(self._peers)

    def add_peers(self, nodes: Iterable[Any]) -> None:
        """Add every node in ``nodes``."""
        for node in nodes:
            self.add_peer(node)

    def peers(self) -> list[Peer]:
        """The peers in node order."""
        return list(self._peers)

    def get_peer(self, node: Any) -> Peer | None:
        """Return the peer for ``node``, or ``None``."""
        pos = self._find(node)
        return None if pos < 0 else self._peers[pos]

    def remove_peer(self, node: Any) -> int:
        """Remove the peer for ``node`` and return the position it had."""
        pos = self._find(node)
        if pos < 0:
            raise KeyError(node)
        del self._peers[pos]
        return pos

    def index(self, node: Any) -> int:
        """Return the position of ``node`` in the set."""
        pos = self._find(node)
        if pos < 0:
            raise KeyError(node)
        return pos

    def clear(self, size: int = 0) -> None:
        """Remove every peer and set the capacity to ``size``."""
        self._peers.clear()
        self._capacity = max(size, 0)

    def __len__(self) -> int:
        return len(self._peers)

    def __iter__(self) -> Iterator[Peer]:
        return iter(list(self._peers))

    def __contains__(self, node: object) -> bool:
        return self._find(node) >= 0