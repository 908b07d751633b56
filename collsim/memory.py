"""Simple memory model with fixed bandwidth and access latency."""

from __future__ import annotations

from typing import Any, Protocol


class _Clock(Protocol):
    def sim_get_time(self) -> Any: ...


class SimpleMemory:
    """Memory that serves NPU and NIC accesses at fixed bandwidths.

    NIC accesses also pay an access latency and queue behind earlier
    requests of the same kind (reads and writes are queued separately).
    """

    def __init__(
        self,
        network: _Clock,
        access_latency: float,
        npu_access_bw_gb: float,
        nic_access_bw_gb: float,
    ) -> None:
        self.network = network
        self.access_latency = access_latency
        self.npu_access_bw_gb = npu_access_bw_gb
        self.nic_access_bw_gb = nic_access_bw_gb
        self.last_read_request_serviced = 0.0
        self.last_write_request_serviced = 0.0
        self.nic_read_request_count = 0
        self.nic_write_request_count = 0
        self.npu_read_request_count = 0
        self.npu_write_request_count = 0

    def set_network_api(self, network: _Clock) -> None:
        """Use ``network`` as the source of the current simulated time."""
        self.network = network

    def npu_mem_read(self, size: int) -> int:
        """Delay of an NPU read of ``size`` bytes."""
        self.npu_read_request_count += 1
        return int(size / self.npu_access_bw_gb)

    def npu_mem_write(self, size: int) -> int:
        """Delay of an NPU write of ``size`` bytes."""
        self.npu_write_request_count += 1
        return int(size / self.npu_access_bw_gb)

    def _nic_access(self, size: int, last_serviced: float) -> tuple[int, float]:
        now = float(self.network.sim_get_time().time_val)
        delay = size / self.nic_access_bw_gb
        if now + self.access_latency < last_serviced:
            finished = last_serviced + delay
        else:
            finished = now + self.access_latency + delay
        return int(finished - now), finished

    def nic_mem_read(self, size: int) -> int:
        """Delay until a NIC read of ``size`` bytes completes."""
        self.nic_read_request_count += 1
        offset, self.last_read_request_serviced = self._nic_access(
            size, self.last_read_request_serviced
        )
        return offset

    def nic_mem_write(self, size: int) -> int:
        """Delay until a NIC write of ``size`` bytes completes."""
        self.nic_write_request_count += 1
        offset, self.last_write_request_serviced = self._nic_access(
            size, self.last_write_request_serviced
        )
        return offset

    def mem_read(self, size: int) -> int:
        return self.nic_mem_read(size)

    def mem_write(self, size: int) -> int:
        return self.nic_mem_write(size)