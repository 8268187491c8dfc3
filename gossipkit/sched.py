"""Selection of peers, chunks and peer-chunk pairs for scheduling."""

from __future__ import annotations

import enum
import random
from dataclasses import dataclass
from itertools import groupby, islice, product
from typing import Any, Callable, Iterable, Sequence

Evaluate = Callable[[Any], float]
Predicate = Callable[[Any, Any], bool]


class SchedOrdering(enum.Enum):
    """How candidates are ranked when a subset is selected."""

    BEST = 0
    WEIGHTED = 1


@dataclass(frozen=True)
class PeerChunk:
    """A candidate transfer: ``chunk`` to or from ``peer``."""

    peer: Any
    chunk: Any


def _rng(rng: Any) -> Any:
    return random if rng is None else rng


def _limit(count: int | None, available: int) -> int:
    if count is None:
        return available
    if count < 0:
        raise ValueError("count must not be negative")
    return min(count, available)


def select_bests(
    items: Iterable[Any],
    evaluate: Evaluate,
    count: int | None = None,
    rng: Any = None,
) -> list[Any]:
    """Return the ``count`` items with the highest weight.

    Items of equal weight are ordered uniformly at random.
    """
    items = list(items)
    rng = _rng(rng)
    weights = [evaluate(item) for item in items]
    wanted = _limit(count, len(items))
    order = sorted(range(len(items)), key=weights.__getitem__, reverse=True)
    chosen: list[int] = []
    for _, group in groupby(order, key=weights.__getitem__):
        if len(chosen) >= wanted:
            break
        block = list(group)
        rng.shuffle(block)
        chosen.extend(block)
    return [items[i] for i in chosen[:wanted]]


def select_weighted(
    items: Iterable[Any],
    weight: Evaluate,
    count: int | None = None,
    rng: Any = None,
) -> list[Any]:
    """Draw up to ``count`` distinct items with probability proportional to weight.

    Negative weights count as zero; if every weight is zero all items are
    equally likely. Items of zero weight are never drawn otherwise, so fewer
    than ``count`` items may come back.
    """
    items = list(items)
    rng = _rng(rng)
    weights = [max(weight(item), 0.0) for item in items]
    if sum(weights) == 0:
        weights = [1.0] * len(items)
    total = sum(weights)
    positive = sum(1 for w in weights if w > 0)
    wanted = min(_limit(count, len(items)), positive)

    selected: list[int] = []
    taken: set[int] = set()
    while len(selected) < wanted:
        target = total * rng.random()
        cdf = 0.0
        for index, w in enumerate(weights):
            cdf += w
            if target < cdf:
                if index not in taken:
                    taken.add(index)
                    selected.append(index)
                break
    return [items[i] for i in selected]


def select_with_ordering(
    ordering: SchedOrdering,
    items: Iterable[Any],
    evaluate: Evaluate,
    count: int | None = None,
    rng: Any = None,
) -> list[Any]:
    """Select up to ``count`` items with the given ordering method."""
    if ordering is SchedOrdering.WEIGHTED:
        return select_weighted(items, evaluate, count, rng)
    return select_bests(items, evaluate, count, rng)


def select_peers(
    ordering: SchedOrdering,
    peers: Iterable[Any],
    evaluate: Evaluate,
    count: int | None = None,
    rng: Any = None,
) -> list[Any]:
    """Select up to ``count`` peers."""
    return select_with_ordering(ordering, peers, evaluate, count, rng)


def select_chunks(
    ordering: SchedOrdering,
    chunks: Iterable[Any],
    evaluate: Evaluate,
    count: int | None = None,
    rng: Any = None,
) -> list[Any]:
    """Select up to ``count`` chunks."""
    return select_with_ordering(ordering, chunks, evaluate, count, rng)


def select_pairs(
    ordering: SchedOrdering,
    pairs: Iterable[PeerChunk],
    evaluate: Evaluate,
    count: int | None = None,
    rng: Any = None,
) -> list[PeerChunk]:
    """Select up to ``count`` peer-chunk pairs."""
    return select_with_ordering(ordering, pairs, evaluate, count, rng)


def _allowed(predicate: Predicate | None, peer: Any, chunk: Any) -> bool:
    return predicate is None or bool(predicate(peer, chunk))


def _take(candidates: Iterable[Any], limit: int | None) -> list[Any]:
    if limit is not None and limit < 0:
        raise ValueError("limit must not be negative")
    return list(islice(candidates, limit))


def filter_peers(
    peers: Iterable[Any],
    chunks: Sequence[Any],
    limit: int | None = None,
    predicate: Predicate | None = None,
) -> list[Any]:
    """Keep the peers for which ``predicate`` holds with at least one chunk."""
    chunks = list(chunks)
    return _take(
        (p for p in peers if any(_allowed(predicate, p, c) for c in chunks)),
        limit,
    )


def filter_chunks(
    peers: Sequence[Any],
    chunks: Iterable[Any],
    limit: int | None = None,
    predicate: Predicate | None = None,
) -> list[Any]:
    """Keep the chunks for which ``predicate`` holds with at least one peer."""
    peers = list(peers)
    return _take(
        (c for c in chunks if any(_allowed(predicate, p, c) for p in peers)),
        limit,
    )


def filter_pairs(
    pairs: Iterable[PeerChunk], predicate: Predicate | None = None
) -> list[PeerChunk]:
    """Keep the pairs for which ``predicate`` holds."""
    return [pc for pc in pairs if _allowed(predicate, pc.peer, pc.chunk)]


def select_peers_for_chunks(
    ordering: SchedOrdering,
    peers: Iterable[Any],
    chunks: Sequence[Any],
    count: int | None = None,
    predicate: Predicate | None = None,
    evaluate: Evaluate = lambda _: 1.0,
    rng: Any = None,
) -> list[Any]:
    """Select up to ``count`` peers usable with at least one of ``chunks``."""
    filtered = filter_peers(peers, chunks, None, predicate)
    return select_peers(ordering, filtered, evaluate, count, rng)


def select_chunks_for_peers(
    ordering: SchedOrdering,
    peers: Sequence[Any],
    chunks: Iterable[Any],
    count: int | None = None,
    predicate: Predicate | None = None,
    evaluate: Evaluate = lambda _: 1.0,
    rng: Any = None,
) -> list[Any]:
    """Select up to ``count`` chunks usable with at least one of ``peers``."""
    filtered = filter_chunks(peers, chunks, None, predicate)
    return select_chunks(ordering, filtered, evaluate, count, rng)


def to_pairs_peer_first(
    peers: Iterable[Any], chunks: Iterable[Any], limit: int | None = None
) -> list[PeerChunk]:
    """Pair every peer with every chunk, peer by peer."""
    chunks = list(chunks)
    return _take((PeerChunk(p, c) for p, c in product(peers, chunks)), limit)


def to_pairs_chunk_first(
    peers: Iterable[Any], chunks: Iterable[Any], limit: int | None = None
) -> list[PeerChunk]:
    """Pair every peer with every chunk, chunk by chunk."""
    peers = list(peers)
    return _take((PeerChunk(p, c) for c, p in product(chunks, peers)), limit)


def to_pairs(
    peers: Iterable[Any], chunks: Iterable[Any], limit: int | None = None
) -> list[PeerChunk]:
    """Pair every peer with every chunk, chunk by chunk."""
    return to_pairs_chunk_first(peers, chunks, limit)


def sched_select_peer_first(
    ordering: SchedOrdering,
    peers: Sequence[Any],
    chunks: Sequence[Any],
    count: int,
    predicate: Predicate | None,
    peer_evaluate: Evaluate,
    chunk_evaluate: Evaluate,
    rng: Any = None,
) -> list[PeerChunk]:
    """Pick one peer, then up to ``count`` chunks for it."""
    chosen_peers = select_peers_for_chunks(
        ordering, peers, chunks, 1, predicate, peer_evaluate, rng
    )
    chosen_chunks = select_chunks_for_peers(
        ordering, chosen_peers, chunks, count, predicate, chunk_evaluate, rng
    )
    return to_pairs_peer_first(chosen_peers, chosen_chunks, count)


def sched_select_chunk_first(
    ordering: SchedOrdering,
    peers: Sequence[Any],
    chunks: Sequence[Any],
    count: int,
    predicate: Predicate | None,
    peer_evaluate: Evaluate,
    chunk_evaluate: Evaluate,
    rng: Any = None,
) -> list[PeerChunk]:
    """Pick one chunk, then up to ``count`` peers for it."""
    chosen_chunks = select_chunks_for_peers(
        ordering, peers, chunks, 1, predicate, chunk_evaluate, rng
    )
    chosen_peers = select_peers_for_chunks(
        ordering, peers, chosen_chunks, count, predicate, peer_evaluate, rng
    )
    return to_pairs_chunk_first(chosen_peers, chosen_chunks, count)


def sched_select_hybrid(
    ordering: SchedOrdering,
    peers: Sequence[Any],
    chunks: Sequence[Any],
    count: int,
    predicate: Predicate | None,
    pair_evaluate: Evaluate,
    rng: Any = None,
) -> list[PeerChunk]:
    """Select up to ``count`` pairs among all allowed peer-chunk pairs."""
    pairs = filter_pairs(to_pairs(peers, chunks), predicate)
    return select_pairs(ordering, pairs, pair_evaluate, count, rng)


def sched_select_composed(
    ordering: SchedOrdering,
    peers: Sequence[Any],
    chunks: Sequence[Any],
    count: int,
    predicate: Predicate | None,
    peer_evaluate: Evaluate,
    chunk_evaluate: Evaluate,
    combine: Callable[[float, float], float],
    rng: Any = None,
) -> list[PeerChunk]:
    """Like :func:`sched_select_hybrid`, weighting a pair by combining its
    peer and chunk weights."""

    def pair_weight(pc: PeerChunk) -> float:
        return combine(peer_evaluate(pc.peer), chunk_evaluate(pc.chunk))

    return sched_select_hybrid(
        ordering, peers, chunks, count, predicate, pair_weight, rng
    )