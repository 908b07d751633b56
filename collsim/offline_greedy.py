"""Offline greedy scheduling of chunks over the dimensions of a topology."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Sequence

from collsim.logical_topology import ComType

_log = logging.getLogger(__name__)

_MIB = 1048576


class InterDimensionScheduling(Enum):
    """Policy for ordering the dimensions a chunk goes through."""

    ASCENDING = auto()
    ONLINE_GREEDY = auto()
    ROUND_ROBIN = auto()
    OFFLINE_GREEDY = auto()
    OFFLINE_GREEDY_FLEX = auto()


@dataclass
class DimElapsedTime:
    """Accumulated load on one dimension."""

    dim_num: int
    elapsed_time: float = 0.0

    def __lt__(self, other: "DimElapsedTime") -> bool:
        return self.elapsed_time < other.elapsed_time


@dataclass
class ChunkScheduleBoard:
    """Schedules shared by all generators of one simulation.

    The leader (node 0) computes each chunk's schedule once; every other
    generator reads it, and the entry is dropped once ``consumers``
    generators have taken it.
    """

    consumers: int
    leader: "OfflineGreedy | None" = None
    chunk_schedule: dict[int, list[int]] = field(default_factory=dict)
    schedule_consumer: dict[int, int] = field(default_factory=dict)
    global_chunk_size: dict[int, int] = field(default_factory=dict)


class OfflineGreedy:
    """Orders dimensions for each chunk so that dimension loads stay balanced."""

    def __init__(
        self,
        node_id: int,
        board: ChunkScheduleBoard,
        physical_dims: Sequence[int],
        bandwidth_per_dim: Sequence[float],
        dim_to_break: int = -1,
        logical_broken_dims: Sequence[int] | None = None,
    ) -> None:
        self.node_id = node_id
        self.board = board
        if dim_to_break == -1:
            self.dim_size = list(physical_dims)
            self.dim_bw = [float(bandwidth_per_dim[i]) for i in range(len(self.dim_size))]
        else:
            if logical_broken_dims is None:
                raise ValueError("logical_broken_dims is required when a dimension is broken")
            self.dim_size = list(logical_broken_dims)
            self.dim_bw = [
                float(bandwidth_per_dim[i - 1 if i > dim_to_break else i])
                for i in range(len(self.dim_size))
            ]
        self.dim_elapsed_time = [DimElapsedTime(i) for i in range(len(self.dim_size))]
        if node_id == 0:
            board.leader = self
            _log.info(
                "Themis is configured with the following parameters: "
                "Dim size: %s BW per dim: %s",
                ", ".join(map(str, self.dim_size)),
                ", ".join(map(str, self.dim_bw)),
            )

    def get_chunk_size_from_elapsed_time(
        self, elapsed_time: float, dim: DimElapsedTime, comm_type: ComType
    ) -> int:
        """Chunk size that would keep ``dim`` busy for ``elapsed_time``."""
        size = self.dim_size[dim.dim_num]
        ratio = self.dim_bw[dim.dim_num] / self.dim_bw[0]
        if comm_type is ComType.REDUCE_SCATTER:
            share = (size - 1) / size
        else:
            share = float(size - 1)
        return int(((elapsed_time * ratio) / share) * _MIB)

    def reset_loads(self) -> None:
        """Clear the load of every dimension."""
        for index, dim in enumerate(self.dim_elapsed_time):
            dim.elapsed_time = 0.0
            dim.dim_num = index

    def _skipped(self, dim_num: int, involved: Sequence[bool]) -> bool:
        return not involved[dim_num] or self.dim_size[dim_num] == 1

    def _add_load(self, dim: DimElapsedTime, dim_num: int, chunk_size: int, comm_type: ComType) -> int:
        size = self.dim_size[dim_num]
        ratio = self.dim_bw[dim_num] / self.dim_bw[0]
        if comm_type is ComType.REDUCE_SCATTER:
            dim.elapsed_time += ((chunk_size / _MIB) * ((size - 1) / size)) / ratio
            return chunk_size // size
        dim.elapsed_time += ((chunk_size / _MIB) * float(size - 1)) / ratio
        return chunk_size * size

    def _balancing_size(
        self,
        dim: DimElapsedTime,
        position: int,
        comm_type: ComType,
        involved: Sequence[bool],
    ) -> int:
        dims = self.dim_elapsed_time
        if comm_type is ComType.REDUCE_SCATTER:
            difference = abs(dims[-1].elapsed_time - dim.elapsed_time)
            return self.get_chunk_size_from_elapsed_time(
                difference, dim, ComType.REDUCE_SCATTER
            )
        last = len(dims) - 1
        while self._skipped(dims[last].dim_num, involved):
            last -= 1
        difference = abs(dims[last].elapsed_time - dim.elapsed_time)
        size = self.get_chunk_size_from_elapsed_time(
            difference, dims[last], ComType.ALL_GATHER
        )
        for index in range(last - 1, position - 1, -1):
            if not self._skipped(dims[index].dim_num, involved):
                size //= self.dim_size[dims[index].dim_num]
        return size

    def _schedule_in_order(
        self,
        chunk_size: int,
        comm_type: ComType,
        involved: Sequence[bool],
        result: list[int],
        append_skipped: bool,
    ) -> None:
        self.dim_elapsed_time = sorted(self.dim_elapsed_time, key=lambda d: d.dim_num)
        if comm_type is ComType.ALL_GATHER:
            self.dim_elapsed_time.reverse()
        for my_dim, dim in enumerate(self.dim_elapsed_time):
            if self._skipped(my_dim, involved):
                if append_skipped:
                    result.append(my_dim)
                continue
            chunk_size = self._add_load(dim, my_dim, chunk_size, comm_type)

    def get_chunk_scheduling(
        self,
        chunk_id: int,
        remaining_data_size: int,
        recommended_chunk_size: int,
        dimensions_involved: Sequence[bool],
        inter_dim_scheduling: InterDimensionScheduling,
        comm_type: ComType,
    ) -> tuple[list[int], int]:
        """Dimension order for ``chunk_id`` and the data size left afterwards."""
        board = self.board
        if chunk_id in board.chunk_schedule:
            board.schedule_consumer[chunk_id] += 1
            remaining_data_size -= board.global_chunk_size.get(chunk_id, 0)
            if board.schedule_consumer[chunk_id] == board.consumers:
                schedule = board.chunk_schedule.pop(chunk_id)
                del board.schedule_consumer[chunk_id]
                board.global_chunk_size.pop(chunk_id, None)
                return schedule, remaining_data_size
            return list(board.chunk_schedule[chunk_id]), remaining_data_size

        if self.node_id != 0:
            if board.leader is None:
                raise RuntimeError("no leader scheduler registered on the board")
            return board.leader.get_chunk_scheduling(
                chunk_id,
                remaining_data_size,
                recommended_chunk_size,
                dimensions_involved,
                inter_dim_scheduling,
                comm_type,
            )

        if comm_type is ComType.ALL_REDUCE:
            comm_type = ComType.REDUCE_SCATTER
        self.dim_elapsed_time.sort(key=lambda d: d.elapsed_time)
        if comm_type is ComType.ALL_GATHER:
            self.dim_elapsed_time.reverse()

        result: list[int] = []
        chunk_size = recommended_chunk_size
        size_calculated = False
        if inter_dim_scheduling is InterDimensionScheduling.OFFLINE_GREEDY:
            taken = min(remaining_data_size, chunk_size)
            board.global_chunk_size[chunk_id] = taken
            remaining_data_size -= taken

        for position, dim in enumerate(self.dim_elapsed_time):
            if self._skipped(dim.dim_num, dimensions_involved):
                result.append(dim.dim_num)
                continue
            if (
                inter_dim_scheduling is InterDimensionScheduling.OFFLINE_GREEDY_FLEX
                and not size_calculated
            ):
                size_calculated = True
                chunk_size = self._balancing_size(
                    dim, position, comm_type, dimensions_involved
                )
                if chunk_size < recommended_chunk_size:
                    result = list(range(len(self.dim_elapsed_time)))
                    taken = min(remaining_data_size, recommended_chunk_size)
                    board.global_chunk_size[chunk_id] = taken
                    chunk_size = taken
                    remaining_data_size -= taken
                    board.chunk_schedule[chunk_id] = list(result)
                    board.schedule_consumer[chunk_id] = 1
                    self._schedule_in_order(
                        chunk_size, comm_type, dimensions_involved, result, True
                    )
                    return result, remaining_data_size
                taken = min(remaining_data_size, chunk_size)
                board.global_chunk_size[chunk_id] = taken
                remaining_data_size -= taken
            elif (
                inter_dim_scheduling is InterDimensionScheduling.OFFLINE_GREEDY
                and not size_calculated
            ):
                size_calculated = True
                diff_size = self._balancing_size(
                    dim, position, comm_type, dimensions_involved
                )
                if diff_size < recommended_chunk_size // 16:
                    result = list(range(len(self.dim_elapsed_time)))
                    board.chunk_schedule[chunk_id] = list(result)
                    board.schedule_consumer[chunk_id] = 1
                    self._schedule_in_order(
                        chunk_size, comm_type, dimensions_involved, result, False
                    )
                    return result, remaining_data_size
            result.append(dim.dim_num)
            chunk_size = self._add_load(dim, dim.dim_num, chunk_size, comm_type)

        board.chunk_schedule[chunk_id] = list(result)
        board.schedule_consumer[chunk_id] = 1
        return result, remaining_data_size