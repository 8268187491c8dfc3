import random

import pytest

from gossipkit.sched import (
    PeerChunk,
    SchedOrdering,
    filter_chunks,
    filter_pairs,
    filter_peers,
    sched_select_chunk_first,
    sched_select_composed,
    sched_select_hybrid,
    sched_select_peer_first,
    select_bests,
    select_chunks,
    select_chunks_for_peers,
    select_pairs,
    select_peers,
    select_peers_for_chunks,
    select_weighted,
    select_with_ordering,
    to_pairs,
    to_pairs_chunk_first,
    to_pairs_peer_first,
)


def identity(x):
    return x


def test_select_bests_orders_descending():
    assert select_bests([1, 5, 3, 4], identity, 4, random.Random(1)) == [5, 4, 3, 1]


def test_select_bests_truncates_to_count():
    assert select_bests([1, 5, 3, 4], identity, 2, random.Random(1)) == [5, 4]


def test_select_bests_count_larger_than_items():
    assert select_bests([2, 7], identity, 10, random.Random(0)) == [7, 2]


def test_select_bests_ties_are_shuffled():
    items = ["a", "b", "c", "d"]
    seen = set()
    for seed in range(40):
        result = select_bests(items, lambda _: 1.0, 4, random.Random(seed))
        assert sorted(result) == items
        seen.add(tuple(result))
    assert len(seen) > 1


def test_select_bests_tie_group_kept_below_higher():
    items = [("x", 1), ("y", 3), ("z", 1), ("w", 3)]
    result = select_bests(items, lambda it: it[1], 4, random.Random(3))
    assert {r[0] for r in result[:2]} == {"y", "w"}
    assert {r[0] for r in result[2:]} == {"x", "z"}


def test_select_bests_negative_count():
    with pytest.raises(ValueError):
        select_bests([1], identity, -1)


def test_select_weighted_skips_zero_weights():
    items = [0, 0, 2, 3]
    for seed in range(20):
        result = select_weighted(items, identity, 2, random.Random(seed))
        assert sorted(result) == [2, 3]


def test_select_weighted_negative_weights_never_chosen():
    items = [-5, 1, -2]
    result = select_weighted(items, identity, 3, random.Random(7))
    assert result == [1]


def test_select_weighted_all_zero_is_uniform():
    items = [0, 0, 0]
    result = select_weighted(items, identity, 3, random.Random(5))
    assert sorted(result) == items
    assert len(result) == 3


def test_select_weighted_distinct_selection():
    items = list(range(1, 11))
    result = select_weighted(items, identity, 6, random.Random(11))
    assert len(result) == 6
    assert len(set(result)) == 6
    assert set(result) <= set(items)


def test_select_weighted_prefers_heavy():
    items = ["heavy", "light"]
    weights = {"heavy": 1e6, "light": 1e-6}
    for seed in range(30):
        assert select_weighted(items, weights.get, 1, random.Random(seed)) == ["heavy"]


def test_select_with_ordering_dispatch():
    rng = random.Random(2)
    best = select_with_ordering(SchedOrdering.BEST, [3, 9, 1], identity, 1, rng)
    assert best == [9]
    weighted = select_with_ordering(SchedOrdering.WEIGHTED, [0, 9, 0], identity, 1, rng)
    assert weighted == [9]


def test_select_peers_chunks_pairs_wrappers():
    rng = random.Random(4)
    assert select_peers(SchedOrdering.BEST, ["p", "qq"], len, 1, rng) == ["qq"]
    assert select_chunks(SchedOrdering.BEST, [4, 8], identity, 1, rng) == [8]
    pairs = [PeerChunk(1, 2), PeerChunk(3, 4)]
    assert select_pairs(
        SchedOrdering.BEST, pairs, lambda pc: pc.chunk, 1, rng
    ) == [PeerChunk(3, 4)]


def test_filter_peers_requires_matching_chunk():
    result = filter_peers([1, 2, 3], [10, 20], None, lambda p, c: p * 10 == c)
    assert result == [1, 2]


def test_filter_peers_limit():
    assert filter_peers([1, 2, 3], [10], 2, None) == [1, 2]


def test_filter_peers_no_chunks_keeps_nothing():
    assert filter_peers([1, 2], [], None, None) == []


def test_filter_chunks_requires_matching_peer():
    result = filter_chunks([1, 3], [10, 20, 30], None, lambda p, c: p * 10 == c)
    assert result == [10, 30]


def test_filter_chunks_limit():
    assert filter_chunks([1], [5, 6, 7], 1, None) == [5]


def test_filter_pairs_in_order():
    pairs = [PeerChunk(1, 1), PeerChunk(1, 2), PeerChunk(2, 2)]
    assert filter_pairs(pairs, lambda p, c: p == c) == [PeerChunk(1, 1), PeerChunk(2, 2)]
    assert filter_pairs(pairs, None) == pairs


def test_to_pairs_peer_first_order():
    assert to_pairs_peer_first(["a", "b"], [1, 2]) == [
        PeerChunk("a", 1),
        PeerChunk("a", 2),
        PeerChunk("b", 1),
        PeerChunk("b", 2),
    ]


def test_to_pairs_chunk_first_order():
    assert to_pairs_chunk_first(["a", "b"], [1, 2]) == [
        PeerChunk("a", 1),
        PeerChunk("b", 1),
        PeerChunk("a", 2),
        PeerChunk("b", 2),
    ]


def test_to_pairs_is_chunk_first_and_limited():
    peers, chunks = ["a", "b", "c"], [1, 2]
    assert to_pairs(peers, chunks) == to_pairs_chunk_first(peers, chunks)
    assert to_pairs(peers, chunks, 3) == to_pairs_chunk_first(peers, chunks)[:3]


def test_select_peers_for_chunks():
    result = select_peers_for_chunks(
        SchedOrdering.BEST, [1, 2, 3], [20, 30], 5,
        lambda p, c: p * 10 == c, identity, random.Random(0),
    )
    assert result == [3, 2]


def test_select_chunks_for_peers():
    result = select_chunks_for_peers(
        SchedOrdering.BEST, [1, 2], [10, 20, 30], 1,
        lambda p, c: p * 10 == c, identity, random.Random(0),
    )
    assert result == [20]


def test_sched_select_peer_first():
    allowed = {("a", 1), ("a", 2), ("b", 3)}
    peer_weight = {"a": 5, "b": 1}
    result = sched_select_peer_first(
        SchedOrdering.BEST, ["a", "b"], [1, 2, 3], 2,
        lambda p, c: (p, c) in allowed, peer_weight.get, identity, random.Random(0),
    )
    assert result == [PeerChunk("a", 2), PeerChunk("a", 1)]


def test_sched_select_chunk_first():
    allowed = {("a", 1), ("b", 1), ("c", 1), ("a", 2)}
    peer_weight = {"a": 1, "b": 3, "c": 2}
    result = sched_select_chunk_first(
        SchedOrdering.BEST, ["a", "b", "c"], [1, 2], 2,
        lambda p, c: (p, c) in allowed, peer_weight.get, lambda c: -c,
        random.Random(0),
    )
    assert result == [PeerChunk("b", 1), PeerChunk("c", 1)]


def test_sched_select_hybrid_best_pair():
    result = sched_select_hybrid(
        SchedOrdering.BEST, [1, 2], [10, 20], 1, None,
        lambda pc: pc.peer * pc.chunk, random.Random(0),
    )
    assert result == [PeerChunk(2, 20)]


def test_sched_select_hybrid_respects_filter():
    result = sched_select_hybrid(
        SchedOrdering.BEST, [1, 2], [10, 20], 1, lambda p, c: p != 2,
        lambda pc: pc.peer * pc.chunk, random.Random(0),
    )
    assert result == [PeerChunk(1, 20)]


def test_sched_select_composed_matches_hybrid():
    peers, chunks = [1, 2, 3], [4, 5]
    composed = sched_select_composed(
        SchedOrdering.BEST, peers, chunks, 6, None,
        identity, identity, lambda a, b: a + 10 * b, random.Random(0),
    )
    hybrid = sched_select_hybrid(
        SchedOrdering.BEST, peers, chunks, 6, None,
        lambda pc: pc.peer + 10 * pc.chunk, random.Random(0),
    )
    assert composed == hybrid
    assert composed[0] == PeerChunk(3, 5)


def test_sched_select_composed_weighted_returns_valid_pairs():
    peers, chunks = ["x", "y"], [1, 2, 3]
    result = sched_select_composed(
        SchedOrdering.WEIGHTED, peers, chunks, 4, None,
        lambda p: 1.0, identity, lambda a, b: a * b, random.Random(9),
    )
    assert len(result) == 4
    assert len(set(result)) == 4
    assert set(result) <= set(to_pairs(peers, chunks))