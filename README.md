# gossipkit

Small, dependency-free building blocks for peer-to-peer overlay software.

## What is inside

- `gossipkit.config` — parses `name=value,name=value` strings into a
  `Config` (`Config.parse`, `parse_config`). Parsing stops at the first item
  without `=`; the first tag of a name wins. Lookups: `get_str`, `get_int`
  (leading integer of the value) and `get_float` (leading number), each with a
  default for absent names; `in` and `len()` work too. A name longer than 31
  characters or a value longer than 63 raises `ConfigError`.
- `gossipkit.int_coding` — network byte order packing: `pack_int`,
  `pack_int16` (values wrap to 32 or 16 bits), `unpack_int`, `unpack_int16`.
- `gossipkit.fifo_queue` — `FifoQueue`, a first-in first-out queue whose
  `capacity` doubles when full. `add` refuses `None`; `head`, `get` and
  `remove_head` return `None` when there is nothing there; `drain` empties it,
  optionally passing each element to a release function.
- `gossipkit.request_handler` — `RequestHandler` runs queued requests on a
  worker thread. A callback takes the request data and returns
  `(status, response)`, where status is a `RequestStatus`: `DONE` queues the
  response (unless it is `None`), `REQUEUE` puts the request back at the tail,
  `ABORT` drops it. Read responses with `get_response`, `remove_response` or
  `wait_for_response(timeout)`. It is a context manager; `close` stops the
  worker.
- `gossipkit.net_helper` — `NodeID`, an IPv4 address and port that can be
  compared, hashed, and written to and read from 16 bytes (`dump`,
  `undump`); `create_node`; and `NetHelper`, a bound UDP socket whose
  `send_to_peer` splits messages into 60 KiB fragments and whose
  `recv_from_peer` reassembles them. `wait_for_data(timeout, fds)` returns
  `TIMEOUT`, `DATA` or `USER_FDS` with the ready descriptors. Errors raise
  `NetHelperError`.
- `gossipkit.peerset` — `PeerSet`, peers kept sorted by `NodeID`, one `Peer`
  record per node. The `size` configuration tag sets the initial capacity,
  which grows by 32 when full. `remove_peer` and `index` raise `KeyError` for
  unknown nodes.
- `gossipkit.sched` — selection of peers, chunks and `PeerChunk` pairs,
  either the best by weight (`SchedOrdering.BEST`, ties broken at random) or
  by weighted random draw without replacement (`SchedOrdering.WEIGHTED`).
  Filtering and pairing helpers (`filter_peers`, `filter_chunks`,
  `filter_pairs`, `to_pairs`, ...) and the combined strategies
  `sched_select_peer_first`, `sched_select_chunk_first`,
  `sched_select_hybrid` and `sched_select_composed`. Every random choice
  takes an optional `rng`.
- `gossipkit.peersampler` — `PeerSampler` picks a protocol from the
  `protocol` configuration tag. The built-in `dummy` protocol is
  `DummySampler`, whose neighbours are read from `peers.txt` (`address port`
  lines, see `load_peers`) and extended with `add_peer`; it supports no
  metadata, resizing or removal and raises `PeerSamplerError` for them.
  Further protocols are added with `register_protocol`.
- `gossipkit.topman` — `DumbTopologyManager` keeps a neighbourhood; once a
  period (`period` seconds) `parse_data` keeps `memory` percent of it and
  fills the rest, up to `cache_size`, from the peers the sampler supplied.
  `TopologyManager` is a front end to it. Errors raise `TopologyError`.

## Installing

```
pip install .
```

## A short tour

```python
from gossipkit.config import Config
from gossipkit.net_helper import NetHelper, create_node
from gossipkit.peerset import PeerSet
from gossipkit.sched import SchedOrdering, select_peers

cfg = Config.parse("size=8,protocol=dummy")
print(cfg.get_int("size", 0))         # 8

with NetHelper("127.0.0.1", 6000, "") as a, NetHelper("127.0.0.1", 6001, "") as b:
    a.send_to_peer(b.node, b"hello")
    sender, payload = b.recv_from_peer(1024)
    print(sender, payload)            # 127.0.0.1:6000 b'hello'

peers = PeerSet("size=8")
peers.add_peers([create_node("10.0.0.2", 7000), create_node("10.0.0.1", 7000)])
print([str(p.node) for p in peers])   # sorted by node identifier

best = select_peers(SchedOrdering.BEST, [1, 5, 3], float, 2, None)
print(best)                           # [5, 3]
```

## What it does not do

- Only the `dummy` peer sampling protocol is built in. Without a `protocol`
  tag `PeerSampler` asks for `ncast`, which is not provided, so it raises
  `PeerSamplerError` unless a protocol of that name has been registered with
  `register_protocol`. There are no gossip-based samplers.
- `TopologyManager` accepts a ranking function but does not use it; all work
  is done by `DumbTopologyManager`, which sends and reads no messages of its
  own.
- `NetHelper.bind_msg_type` only records the type; every message is
  delivered.
- There is no command-line program; this is a library.

## Running the tests

```
pip install .[test]
pytest
```