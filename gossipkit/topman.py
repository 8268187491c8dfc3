"""Topology management: a neighbourhood rebuilt from peer samples."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from .config import Config

log = logging.getLogger(__name__)

DEFAULT_MEMORY = 20
DEFAULT_CACHE_SIZE = 20
DEFAULT_PERIOD = 10

RankingFunction = Callable[[bytes, bytes, bytes], int]


class TopologyError(Exception):
    """Raised when a topology manager operation cannot be carried out."""


@dataclass
class _Entry:
    node: Any
    metadata: bytes


class _Neighbours:
    def __init__(self, capacity: int, metadata_size: int) -> None:
        self.capacity = capacity
        self.metadata_size = metadata_size
        self.entries: list[_Entry] = []

    def add(self, node: Any, metadata: bytes) -> int:
        metadata = bytes(metadata)
        if len(metadata) != self.metadata_size:
            raise TopologyError(
                f"metadata of {len(metadata)} bytes, expected {self.metadata_size}"
            )
        if any(entry.node == node for entry in self.entries):
            return len(self.entries)
        if len(self.entries) >= self.capacity:
            raise TopologyError("neighbourhood is full")
        self.entries.append(_Entry(node, metadata))
        return len(self.entries)

    def remove(self, node: Any) -> int:
        for pos, entry in enumerate(self.entries):
            if entry.node == node:
                del self.entries[pos]
                return len(self.entries)
        raise TopologyError(f"{node} is not a neighbour")

    def __len__(self) -> int:
        return len(self.entries)


class DumbTopologyManager:
    """Each period keeps ``memory`` percent of the neighbours and refills
    the rest from the peers given by the peer sampler.

    Configuration tags: ``cache_size``, ``memory`` (percent) and ``period``
    (seconds).
    """

    def __init__(
        self,
        node: Any,
        metadata: bytes = b"",
        config: str | None = None,
        clock: Callable[[], float] = time.monotonic,
        rng: Any = None,
    ) -> None:
        cfg = Config.parse(config)
        self._cache_size = cfg.get_int("cache_size", DEFAULT_CACHE_SIZE)
        self._memory = cfg.get_int("memory", DEFAULT_MEMORY)
        self._period = cfg.get_int("period", DEFAULT_PERIOD)
        self._node = node
        self._own_metadata = bytes(metadata)
        self._metadata_size = len(self._own_metadata)
        self._cache = _Neighbours(self._cache_size, self._metadata_size)
        self._resizing = False
        self._clock = clock
        self._rng = random if rng is None else rng
        self._last_run = clock()

    def _time_to_run(self) -> bool:
        if self._clock() - self._last_run > self._period:
            self._last_run += self._period
            return True
        return False

    def change_metadata(self, metadata: bytes) -> None:
        """Replace the local metadata with one of the same, non-zero size."""
        metadata = bytes(metadata)
        if not metadata or len(metadata) != self._metadata_size:
            raise TopologyError("metadata must keep its non-zero size")
        self._own_metadata = metadata

    def add_neighbour(self, node: Any, metadata: bytes = b"") -> None:
        """Add ``node`` with its ``metadata`` to the neighbourhood."""
        self._cache.add(node, metadata)

    def parse_data(
        self, data: bytes, peers: Iterable[Any], metadata: Iterable[bytes]
    ) -> bool:
        """Rebuild the neighbourhood once a period has passed.

        ``peers`` and ``metadata`` are the peer sampler's sample. Returns
        ``True`` when the neighbourhood was rebuilt, ``False`` when it is
        not yet time.
        """
        if not self._time_to_run():
            return False
        peers = list(peers)
        metadata = [bytes(m) for m in metadata]
        if len(metadata) != len(peers):
            raise TopologyError("one metadata entry is needed for each peer")
        if any(len(m) != self._metadata_size for m in metadata):
            raise TopologyError("metadata size mismatch with peer sampler")
        if not peers:
            log.warning("no peer available from peer sampler")

        old = self._cache.entries
        current = len(old)
        new = _Neighbours(self._cache_size, self._metadata_size)
        heritage = min(self._cache_size * self._memory // 100, current, self._cache_size)
        while len(new) < heritage:
            if heritage == current:
                pos = len(new)
            else:
                pos = min(int(self._rng.random() * current), current - 1)
            new.add(old[pos].node, old[pos].metadata)
        for node, meta in zip(peers, metadata):
            if len(new) >= self._cache_size:
                break
            new.add(node, meta)
        self._cache = new
        self._resizing = False
        return True

    def give_peers(self, n: int) -> list[tuple[Any, bytes]]:
        """Return up to ``n`` neighbours with their metadata."""
        return [(e.node, e.metadata) for e in self._cache.entries[: max(n, 0)]]

    def metadata(self) -> list[bytes]:
        """The metadata of every neighbour, in neighbourhood order."""
        return [entry.metadata for entry in self._cache.entries]

    def grow_neighbourhood(self, n: int) -> int:
        """Grow the target size by ``n``, at most doubling it."""
        if n <= 0 or self._resizing:
            raise TopologyError("cannot grow the neighbourhood now")
        self._cache_size += min(n, self._cache_size)
        self._resizing = True
        return self._cache_size

    def shrink_neighbourhood(self, n: int) -> int:
        """Shrink the target size by ``n``."""
        if n <= 0 or n >= self._cache_size or self._resizing:
            raise TopologyError("cannot shrink the neighbourhood now")
        self._cache_size -= n
        self._resizing = True
        return self._cache_size

    def remove_neighbour(self, node: Any) -> int:
        """Remove ``node``; return the number of neighbours left."""
        return self._cache.remove(node)

    def neighbourhood_size(self) -> int:
        return len(self._cache)


class TopologyManager:
    """Topology manager front end; the dumb manager does the work."""

    def __init__(
        self,
        node: Any,
        metadata: bytes = b"",
        rank: RankingFunction | None = None,
        config: str | None = None,
    ) -> None:
        self._rank = rank
        self._manager = DumbTopologyManager(node, metadata, config)

    def change_metadata(self, metadata: bytes) -> None:
        self._manager.change_metadata(metadata)

    def add_neighbour(self, node: Any, metadata: bytes = b"") -> None:
        self._manager.add_neighbour(node, metadata)

    def parse_data(
        self, data: bytes, peers: Iterable[Any], metadata: Iterable[bytes]
    ) -> bool:
        return self._manager.parse_data(data, peers, metadata)

    def give_peers(self, n: int) -> list[tuple[Any, bytes]]:
        return self._manager.give_peers(n)

    def metadata(self) -> list[bytes]:
        return self._manager.metadata()

    def grow_neighbourhood(self, n: int) -> int:
        return self._manager.grow_neighbourhood(n)

    def shrink_neighbourhood(self, n: int) -> int:
        return self._manager.shrink_neighbourhood(n)

    def remove_neighbour(self, node: Any) -> int:
        return self._manager.remove_neighbour(node)

    def neighbourhood_size(self) -> int:
        return self._manager.neighbourhood_size()