"""Network back end that learns message latencies and skips detailed simulation.

Every send or receive is first relayed to a wrapped (detailed) back end.
Observed latencies are recorded per ``(src, dest)`` pair.  Later messages of
a known size are completed after the recorded latency. Unknown sizes use a
linear prediction from the two nearest recorded points, except for a small
random share that is still relayed so that the table keeps learning.
"""

from __future__ import annotations

import random
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Protocol

Handler = Callable[[Any], None]

_RELAY_PERCENT = 10


class WrapperKind(Enum):
    """How a message is being simulated."""

    FAST_SEND_RECV = auto()
    DETAILED_SEND = auto()
    DETAILED_RECV = auto()
    UNDEFINED = auto()


@dataclass
class WrapperData:
    """Event payload wrapping the caller's handler and its argument."""

    kind: WrapperKind
    msg_handler: Handler
    fun_arg: Any


@dataclass
class WrapperRelayData(WrapperData):
    """Payload for a message relayed to the wrapped back end."""

    fast_backend: "FastBackEnd"
    creation_time: float
    partner_node: int
    comm_size: int


@dataclass
class _TimeSpec:
    time_val: float
    time_res: str = "ns"


class _NetworkBackend(Protocol):
    def sim_time_resolution(self) -> float: ...

    def sim_finish(self) -> Any: ...

    def sim_comm_size(self, comm: Any) -> Any: ...

    def sim_get_time(self) -> Any: ...

    def sim_init(self, memory: Any) -> Any: ...

    def sim_schedule(self, delta: Any, handler: Handler, arg: Any) -> Any: ...

    def sim_send(self, buffer: Any, count: int, data_type: int, dst: int, tag: int,
                 request: Any, msg_handler: Handler, fun_arg: Any) -> Any: ...

    def sim_recv(self, buffer: Any, count: int, data_type: int, src: int, tag: int,
                 request: Any, msg_handler: Handler, fun_arg: Any) -> Any: ...


class InflightPairsMap:
    """Messages whose other half (send or receive) has not been posted yet."""

    def __init__(self) -> None:
        self._pairs: dict[tuple[int, int, int, int], WrapperKind] = {}

    def insert(
        self,
        src: int,
        dest: int,
        tag: int,
        communication_size: int,
        simulation_type: WrapperKind,
    ) -> None:
        """Record a pending message; a key may only be pending once."""
        key = (src, dest, tag, communication_size)
        if key in self._pairs:
            raise KeyError(f"message {key} is already in flight")
        self._pairs[key] = simulation_type

    def pop(
        self, src: int, dest: int, tag: int, communication_size: int
    ) -> WrapperKind | None:
        """Remove and return the kind of a pending message, or None."""
        return self._pairs.pop((src, dest, tag, communication_size), None)

    def describe(self) -> str:
        """One line per pending message."""
        return "\n".join(
            f"src: {src}, dest: {dest}, tag: {tag}, communicationSize: {size}"
            for src, dest, tag, size in self._pairs
        )

    def __len__(self) -> int:
        return len(self._pairs)


class DynamicLatencyTable:
    """Observed latencies per ``(src, dest)`` pair and message size."""

    def __init__(self) -> None:
        self._tables: dict[tuple[int, int], dict[int, float]] = {}

    def insert_latency_data(
        self, nodes_pair: tuple[int, int], communication_size: int, latency: float
    ) -> None:
        """Record a latency; the first value seen for a size is kept."""
        table = self._tables.setdefault(tuple(nodes_pair), {})
        table.setdefault(communication_size, latency)

    def lookup_latency(
        self, nodes_pair: tuple[int, int], communication_size: int
    ) -> float | None:
        """Exact recorded latency, or None."""
        table = self._tables.get(tuple(nodes_pair))
        if table is None:
            return None
        return table.get(communication_size)

    def predict_latency(
        self, nodes_pair: tuple[int, int], communication_size: int
    ) -> float:
        """Interpolate or extrapolate linearly from the two nearest sizes."""
        if not self.can_predict_latency(nodes_pair):
            raise ValueError(f"not enough latency data for {tuple(nodes_pair)}")
        if self.lookup_latency(nodes_pair, communication_size) is not None:
            raise ValueError(
                f"latency for size {communication_size} is already known"
            )
        table = self._tables[tuple(nodes_pair)]
        sizes = sorted(table)
        upper = bisect_right(sizes, communication_size)
        lower = bisect_left(sizes, communication_size)
        if upper == 0:
            smaller, larger = 0, 1
        elif lower == len(sizes):
            larger = len(sizes) - 1
            smaller = larger - 1
        else:
            smaller, larger = upper - 1, lower
        x1, x2 = sizes[smaller], sizes[larger]
        y1, y2 = table[x1], table[x2]
        slope = (y2 - y1) / (x2 - x1)
        predicted = int(slope * (communication_size - x1) + y1)
        if predicted <= 0:
            raise ValueError(
                f"predicted latency {predicted} for size {communication_size} "
                "is not positive"
            )
        return float(predicted)

    def can_predict_latency(self, nodes_pair: tuple[int, int]) -> bool:
        """True once at least two sizes are recorded for the pair."""
        return len(self._tables.get(tuple(nodes_pair), ())) >= 2

    def describe(self) -> str:
        """Readable dump of every table."""
        lines: list[str] = []
        for (src, dest), table in self._tables.items():
            lines.append(f"src: {src}, dest: {dest}, datapoints: {len(table)}")
            lines.extend(
                f"\t- commSize: {size} - latency: {latency}"
                for size, latency in table.items()
            )
        return "\n".join(lines)


class FastBackEnd:
    """Wraps a detailed back end and replays learned latencies."""

    shared_inflight_pairs = InflightPairsMap()
    shared_latency_table = DynamicLatencyTable()

    def __init__(
        self,
        rank: int,
        wrapped_backend: _NetworkBackend,
        inflight_pairs: InflightPairsMap | None = None,
        latency_table: DynamicLatencyTable | None = None,
        rng: Any = None,
    ) -> None:
        self.rank = rank
        self.wrapped_backend = wrapped_backend
        self.inflight_pairs = (
            inflight_pairs if inflight_pairs is not None else self.shared_inflight_pairs
        )
        self.latency_table = (
            latency_table if latency_table is not None else self.shared_latency_table
        )
        self._rng = rng if rng is not None else random.Random()

    def handle_event(self, data: WrapperData) -> None:
        """Complete a wrapped event and call the caller's handler."""
        if data.kind is WrapperKind.FAST_SEND_RECV:
            data.msg_handler(data.fun_arg)
        elif isinstance(data, WrapperRelayData) and data.kind is WrapperKind.DETAILED_RECV:
            backend = data.fast_backend
            now = backend.wrapped_backend.sim_get_time().time_val
            backend.update_table_recv(
                data.creation_time, now, data.partner_node, data.comm_size
            )
            data.msg_handler(data.fun_arg)
        elif isinstance(data, WrapperRelayData) and data.kind is WrapperKind.DETAILED_SEND:
            backend = data.fast_backend
            now = backend.wrapped_backend.sim_get_time().time_val
            backend.update_table_send(
                data.creation_time, now, data.partner_node, data.comm_size
            )
            data.msg_handler(data.fun_arg)
        else:
            raise ValueError(f"Event type undefined: {data.kind}")

    def sim_comm_get_rank(self) -> int:
        return self.rank

    def sim_comm_size(self, comm: Any) -> Any:
        return self.wrapped_backend.sim_comm_size(comm)

    def sim_finish(self) -> int:
        self.wrapped_backend.sim_finish()
        return 1

    def sim_time_resolution(self) -> float:
        return self.wrapped_backend.sim_time_resolution()

    def sim_init(self, memory: Any) -> Any:
        return self.wrapped_backend.sim_init(memory)

    def sim_get_time(self) -> Any:
        return self.wrapped_backend.sim_get_time()

    def sim_schedule(self, delta: Any, handler: Handler, arg: Any) -> None:
        self.wrapped_backend.sim_schedule(delta, handler, arg)

    def update_table_send(
        self, start: float, finished: float, dst: int, comm_size: int
    ) -> None:
        """Record the latency of a send from this rank to ``dst``."""
        self.latency_table.insert_latency_data(
            (self.sim_comm_get_rank(), dst), comm_size, finished - start
        )

    def update_table_recv(
        self, start: float, finished: float, src: int, comm_size: int
    ) -> None:
        """Record the latency of a receive at this rank from ``src``."""
        self.latency_table.insert_latency_data(
            (src, self.sim_comm_get_rank()), comm_size, finished - start
        )

    def relay_send_request(
        self, buffer: Any, count: int, data_type: int, dst: int, tag: int,
        request: Any, msg_handler: Handler, fun_arg: Any,
    ) -> Any:
        """Pass a send to the wrapped back end and time it."""
        wrapper = WrapperRelayData(
            kind=WrapperKind.DETAILED_SEND,
            msg_handler=msg_handler,
            fun_arg=fun_arg,
            fast_backend=self,
            creation_time=self.wrapped_backend.sim_get_time().time_val,
            partner_node=dst,
            comm_size=count,
        )
        return self.wrapped_backend.sim_send(
            buffer, count, data_type, dst, tag, request, self.handle_event, wrapper
        )

    def relay_recv_request(
        self, buffer: Any, count: int, data_type: int, src: int, tag: int,
        request: Any, msg_handler: Handler, fun_arg: Any,
    ) -> Any:
        """Pass a receive to the wrapped back end and time it."""
        wrapper = WrapperRelayData(
            kind=WrapperKind.DETAILED_RECV,
            msg_handler=msg_handler,
            fun_arg=fun_arg,
            fast_backend=self,
            creation_time=self.wrapped_backend.sim_get_time().time_val,
            partner_node=src,
            comm_size=count,
        )
        return self.wrapped_backend.sim_recv(
            buffer, count, data_type, src, tag, request, self.handle_event, wrapper
        )

    def fast_send_recv_request(
        self, delay: float, msg_handler: Handler, fun_arg: Any
    ) -> int:
        """Complete a message after ``delay`` nanoseconds without detail."""
        wrapper = WrapperData(WrapperKind.FAST_SEND_RECV, msg_handler, fun_arg)
        self.wrapped_backend.sim_schedule(
            _TimeSpec(time_val=delay), self.handle_event, wrapper
        )
        return 1

    def _fast_latency(self, pair: tuple[int, int], count: int) -> float:
        latency = self.latency_table.lookup_latency(pair, count)
        if latency is not None:
            return latency
        return self.latency_table.predict_latency(pair, count)

    def _dispatch(
        self, src: int, dst: int, tag: int, count: int, partner_kind: WrapperKind,
        own_kind: WrapperKind, relay: Callable[[], Any],
        msg_handler: Handler, fun_arg: Any,
    ) -> Any:
        pair = (src, dst)
        pending = self.inflight_pairs.pop(src, dst, tag, count)
        if pending is not None:
            if pending is WrapperKind.FAST_SEND_RECV:
                return self.fast_send_recv_request(
                    self._fast_latency(pair, count), msg_handler, fun_arg
                )
            if pending is partner_kind:
                return relay()
            raise RuntimeError(f"inflight pair error: unexpected {pending}")

        latency = self.latency_table.lookup_latency(pair, count)
        if latency is not None:
            self.inflight_pairs.insert(src, dst, tag, count, WrapperKind.FAST_SEND_RECV)
            return self.fast_send_recv_request(latency, msg_handler, fun_arg)

        if self.latency_table.can_predict_latency(pair):
            if self._rng.randrange(100) < _RELAY_PERCENT:
                self.inflight_pairs.insert(src, dst, tag, count, own_kind)
                return relay()
            self.inflight_pairs.insert(src, dst, tag, count, WrapperKind.FAST_SEND_RECV)
            return self.fast_send_recv_request(
                self.latency_table.predict_latency(pair, count), msg_handler, fun_arg
            )

        self.inflight_pairs.insert(src, dst, tag, count, own_kind)
        return relay()

    def sim_send(
        self, buffer: Any, count: int, data_type: int, dst: int, tag: int,
        request: Any, msg_handler: Handler, fun_arg: Any,
    ) -> Any:
        """Send ``count`` bytes to ``dst``, fast or relayed."""
        return self._dispatch(
            self.sim_comm_get_rank(), dst, tag, count,
            WrapperKind.DETAILED_RECV, WrapperKind.DETAILED_SEND,
            lambda: self.relay_send_request(
                buffer, count, data_type, dst, tag, request, msg_handler, fun_arg
            ),
            msg_handler, fun_arg,
        )

    def sim_recv(
        self, buffer: Any, count: int, data_type: int, src: int, tag: int,
        request: Any, msg_handler: Handler, fun_arg: Any,
    ) -> Any:
        """Receive ``count`` bytes from ``src``, fast or relayed."""
        return self._dispatch(
            src, self.sim_comm_get_rank(), tag, count,
            WrapperKind.DETAILED_SEND, WrapperKind.DETAILED_RECV,
            lambda: self.relay_recv_request(
                buffer, count, data_type, src, tag, request, msg_handler, fun_arg
            ),
            msg_handler, fun_arg,
        )