# collsim

Building blocks for simulating collective communication (all-reduce,
all-gather, reduce-scatter, all-to-all) across many accelerators. The package
uses only the standard library.

## What is in it

- `collsim.logical_topology`: the `ComType`, `Complexity` and `BasicTopology`
  enums, the abstract `LogicalTopology`, `BasicLogicalTopology` and
  `ComplexLogicalTopology` classes, and `get_reminder(number, divisible)`.
- `collsim.ring_topology`: `RingTopology`, a ring of nodes spaced `offset`
  ids apart, with `get_receiver_node` / `get_sender_node` for a `Direction`
  (`CLOCKWISE`, `ANTICLOCKWISE`) and `is_enabled()`, which is true when the
  first node of the ring has id 0. Rings are tagged with a `Dimension`
  (`LOCAL`, `VERTICAL`, `HORIZONTAL`, `NA`).
- `collsim.binary_tree`: `BinaryTree` (built as `TreeType.ROOT_MAX` or
  `TreeType.ROOT_MIN`) with `get_parent_id`, `get_left_child_id`,
  `get_right_child_id` (each -1 when absent), `get_node_type` returning a
  `NodeType`, and `describe()` for a text dump of the tree.
- `collsim.double_binary_tree`: `DoubleBinaryTreeTopology`, two mirrored
  trees over the same nodes; `get_topology()` hands them out in turn.
- `collsim.hierarchical`: three-dimensional layouts `Torus3D`,
  `LocalRingGlobalBinaryTree` and `LocalRingNodeA2AGlobalDBT`.
- `collsim.general_complex`: `GeneralComplexTopology`, one logical topology
  per dimension chosen by a `CollectiveImplementationType`. A `ONE_*`
  implementation builds a single ring over all nodes and stops there.
- `collsim.fast_backend`: `FastBackEnd` wraps another network backend. Sends
  and receives are relayed to it at first, and the observed latencies are
  stored per `(src, dest)` pair in a `DynamicLatencyTable`. Later messages of
  a known size are completed after the recorded latency through
  `sim_schedule`; unknown sizes use a linear prediction from the two nearest
  recorded sizes, except for about 10% that are still relayed. Pending halves
  of message pairs are kept in an `InflightPairsMap`. By default all
  instances share one map and one table; pass your own to isolate them.
- `collsim.memory`: `SimpleMemory`, delays for NPU and NIC memory reads and
  writes at fixed bandwidths; NIC accesses add an access latency and queue
  behind earlier requests of the same kind.
- `collsim.offline_greedy`: `OfflineGreedy`, which orders network dimensions
  for each chunk so that per-dimension load stays balanced. Schedules are
  computed once by node 0 and shared through a `ChunkScheduleBoard`;
  `get_chunk_scheduling` returns the dimension order and the data size left.

## Example

```python
from collsim.ring_topology import Dimension, Direction, RingTopology

ring = RingTopology(Dimension.LOCAL, 0, 4, 0, 1)
ring.get_receiver_node(0, Direction.CLOCKWISE)   # 1
ring.get_sender_node(0, Direction.CLOCKWISE)     # 3

from collsim.binary_tree import BinaryTree, TreeType

tree = BinaryTree(0, TreeType.ROOT_MAX, 8, 0, 1)
print(tree.describe())
```

The backend wrapped by `FastBackEnd`, and the clock given to `SimpleMemory`,
are any objects with the methods they call: `sim_get_time()` must return an
object with a `time_val` attribute, and `FastBackEnd` also uses `sim_send`,
`sim_recv`, `sim_schedule`, `sim_comm_size`, `sim_init`, `sim_finish` and
`sim_time_resolution`.

## What it does not do

The package provides topologies, a backend wrapper, a memory model and a
scheduler. It has no collective algorithms that drive packets over these
topologies, no detailed network simulator of its own, no event loop, no
workload or configuration reading, and no command-line program.

## Running the tests

```
pip install .[test]
pytest
```