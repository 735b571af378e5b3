# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Resource-aware sizing of the concurrent fix-worker pool.

The calculation order is fixed: the memory/CPU minimum first, then the load
saturation reduction, then the hard clamp. Clamping before the reduction
would hide saturation on large machines.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final, Literal

import psutil

from .errors import MemoryReserveError

if TYPE_CHECKING:
    from .adapters.base import FrameworkAdapter

MIN_PARALLEL: Final[int] = 2
MAX_PARALLEL_CAP: Final[int] = 6
LOAD_REDUCTION_FACTOR: Final[int] = 50
DEFAULT_MEM_PER_WORKER_GB: Final[float] = 3.0
DEFAULT_MEM_RESERVE: Final[str] = "10%"

MEMORY_LIMIT: Final[str] = "memory"
CPU_LIMIT: Final[str] = "CPU"
CAP_LIMIT: Final[str] = f"coordination overhead (capped at {MAX_PARALLEL_CAP})"
MINIMUM_LIMIT: Final[str] = "minimum enforced"

LoadStatus = Literal["normal", "saturated"]

_BYTES_PER_GB: Final[int] = 1024**3
_MB_PER_GB: Final[int] = 1024
_PERCENT_CEILING: Final[float] = 100.0


@dataclass(frozen=True, slots=True)
class ResourceSnapshot:
    """Point-in-time memory, CPU and load reading.

    The reading is inherently racy; callers compensate with a reserve margin.
    """

    total_mem_gb: float
    available_mem_gb: float
    cpu_cores: int
    cpu_load: float


@dataclass(frozen=True, slots=True)
class ParallelismResult:
    """Worker count plus the constraint that determined it."""

    max_parallel: int
    limiting_factor: str
    load_status: LoadStatus
    memory_bound: int
    cpu_bound: int
    candidate: int
    mem_reserve_gb: float
    effective_mem_gb: float
    resources: ResourceSnapshot

    def to_payload(self) -> dict[str, Any]:
        """Return the snake_case JSON payload consumed by shell scripts."""

        return {
            "max_parallel": self.max_parallel,
            "total_memory_gb": round(self.resources.total_mem_gb, 2),
            "available_memory_gb": round(self.resources.available_mem_gb, 2),
            "mem_reserve_gb": round(self.mem_reserve_gb, 2),
            "effective_memory_gb": round(self.effective_mem_gb, 2),
            "cpu_cores": self.resources.cpu_cores,
            "cpu_load": self.resources.cpu_load,
            "load_status": self.load_status,
            "limiting_factor": self.limiting_factor,
        }


def calculate_optimal_parallel(
    resources: ResourceSnapshot,
    mem_per_worker_gb: float = DEFAULT_MEM_PER_WORKER_GB,
    mem_reserve_gb: float = 0.0,
) -> ParallelismResult:
    """Return the number of workers the machine can sustain.

    Args:
        resources: Snapshot of memory, cores and load.
        mem_per_worker_gb: Memory budget for one worker.
        mem_reserve_gb: Memory kept free for the rest of the system.

    Returns:
        ParallelismResult: Worker count in ``[MIN_PARALLEL, MAX_PARALLEL_CAP]``
        with the limiting factor and load status.

    Raises:
        ValueError: If ``mem_per_worker_gb`` is not positive.
    """

    if not mem_per_worker_gb > 0:
        raise ValueError("memory per worker must be a positive number")

    effective_mem_gb = max(0.0, resources.available_mem_gb - mem_reserve_gb)
    memory_bound = math.floor(effective_mem_gb / mem_per_worker_gb)
    cpu_bound = resources.cpu_cores
    candidate = min(memory_bound, cpu_bound)
    limiting_factor = MEMORY_LIMIT if memory_bound < cpu_bound else CPU_LIMIT

    load_status: LoadStatus = "normal"
    if resources.cpu_load >= resources.cpu_cores:
        load_status = "saturated"
        candidate = candidate * LOAD_REDUCTION_FACTOR // 100

    max_parallel = candidate
    if max_parallel > MAX_PARALLEL_CAP:
        max_parallel = MAX_PARALLEL_CAP
        limiting_factor = CAP_LIMIT
    if max_parallel < MIN_PARALLEL:
        max_parallel = MIN_PARALLEL
        limiting_factor = MINIMUM_LIMIT

    return ParallelismResult(
        max_parallel=max_parallel,
        limiting_factor=limiting_factor,
        load_status=load_status,
        memory_bound=memory_bound,
        cpu_bound=cpu_bound,
        candidate=candidate,
        mem_reserve_gb=mem_reserve_gb,
        effective_mem_gb=effective_mem_gb,
        resources=resources,
    )


def _parse_amount(text: str, original: str) -> float:
    try:
        amount = float(text.strip())
    except ValueError as exc:
        raise MemoryReserveError(f"Invalid memory reserve value: {original}") from exc
    if not math.isfinite(amount) or amount < 0:
        raise MemoryReserveError(f"Invalid memory reserve value: {original}")
    return amount


def parse_mem_reserve(value: str | float, total_mem_gb: float) -> float:
    """Convert a memory reserve specification into gigabytes.

    Accepted forms are ``"10%"`` of total memory, ``"500MB"``, ``"2GB"`` and a
    bare number of gigabytes.

    Raises:
        MemoryReserveError: For negative values, unparseable input, or a
            percentage outside ``[0, 100)``.
    """

    text = str(value).strip()
    lowered = text.lower()
    if text.endswith("%"):
        percent = _parse_amount(text[:-1], text)
        if percent >= _PERCENT_CEILING:
            raise MemoryReserveError(f"Invalid memory reserve percentage: {text}")
        return total_mem_gb * percent / 100
    if lowered.endswith("mb"):
        return _parse_amount(text[:-2], text) / _MB_PER_GB
    if lowered.endswith("gb"):
        return _parse_amount(text[:-2], text)
    return _parse_amount(text, text)


def _rounded_load(value: float) -> float:
    return float(math.floor(value + 0.5))


def detect_resources() -> ResourceSnapshot:
    """Read the current machine's memory, logical cores and 1-minute load."""

    memory = psutil.virtual_memory()
    load_1m, _load_5m, _load_15m = psutil.getloadavg()
    return ResourceSnapshot(
        total_mem_gb=memory.total / _BYTES_PER_GB,
        available_mem_gb=memory.available / _BYTES_PER_GB,
        cpu_cores=psutil.cpu_count(logical=True) or 1,
        cpu_load=_rounded_load(load_1m),
    )


def adjusted_mem_per_worker(base_gb: float, adapter: FrameworkAdapter[Any]) -> float:
    """Scale ``base_gb`` by the adapter's per-worker memory weight."""

    return base_gb * adapter.get_resource_multiplier()


__all__ = [
    "CAP_LIMIT",
    "CPU_LIMIT",
    "DEFAULT_MEM_PER_WORKER_GB",
    "DEFAULT_MEM_RESERVE",
    "LOAD_REDUCTION_FACTOR",
    "MAX_PARALLEL_CAP",
    "MEMORY_LIMIT",
    "MINIMUM_LIMIT",
    "MIN_PARALLEL",
    "LoadStatus",
    "ParallelismResult",
    "ResourceSnapshot",
    "adjusted_mem_per_worker",
    "calculate_optimal_parallel",
    "detect_resources",
    "parse_mem_reserve",
]
