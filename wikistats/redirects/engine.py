"""Coordinate index construction and partition-parallel redirect resolution."""
from __future__ import annotations

from concurrent.futures import Executor, Future, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..data.models import RedirectEdge
from ..utils.logging import get_logger
from .emitter import ResolutionMaps, emit_resolution_maps
from .errors import RedirectIndexUnavailableError, RedirectResolutionError
from .index import RedirectIndex, build_redirect_index_with_stats, partition_edges
from .resolver import DEFAULT_MAX_DEPTH, PartitionResult, resolve_partition

LOGGER = get_logger(__name__)

EXECUTOR_KINDS = ("serial", "thread", "process")


@dataclass(slots=True)
class RedirectResolutionConfig:
    """Configuration for the redirect resolution engine."""

    max_depth: int = DEFAULT_MAX_DEPTH
    num_partitions: int = 4
    max_workers: Optional[int] = None
    executor: str = "thread"

    def validate(self) -> None:
        if self.max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        if self.num_partitions < 1:
            raise ValueError("num_partitions must be at least 1")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("max_workers must be at least 1 when set")
        if self.executor not in EXECUTOR_KINDS:
            raise ValueError(f"executor must be one of {EXECUTOR_KINDS}, got {self.executor!r}")

    @classmethod
    def from_dict(cls, section: Dict[str, Any]) -> "RedirectResolutionConfig":
        max_workers = section.get("max_workers")
        return cls(
            max_depth=int(section.get("max_depth", DEFAULT_MAX_DEPTH)),
            num_partitions=int(section.get("num_partitions", 4)),
            max_workers=int(max_workers) if max_workers is not None else None,
            executor=str(section.get("executor", "thread")),
        )


@dataclass(slots=True)
class ResolutionStats:
    """Counters collected over one resolution run."""

    input_edges: int = 0
    index_size: int = 0
    malformed_edges: int = 0
    duplicate_sources: int = 0
    resolved_edges: int = 0
    cycles: int = 0
    depth_limited: int = 0
    max_hops: int = 0
    partitions: int = 0
    hop_counts: List[int] = field(default_factory=list)


@dataclass(slots=True)
class RedirectResolution:
    """Output of a resolution run."""

    maps: ResolutionMaps
    stats: ResolutionStats
    index: RedirectIndex


class RedirectResolutionEngine:
    """Resolve redirect edges to canonical titles.

    The full edge set is gathered and partitioned, the index is built from it
    and frozen, and only then are the partitions resolved in parallel against
    that single shared index.
    """

    def __init__(self, config: Optional[RedirectResolutionConfig] = None):
        self.config = config or RedirectResolutionConfig()
        self.config.validate()

    def run(self, edges: Iterable[RedirectEdge]) -> RedirectResolution:
        edge_list = [_as_edge(edge) for edge in edges]
        partitions = partition_edges(edge_list, self.config.num_partitions)
        LOGGER.info(
            "Resolving %s redirect edges over %s partitions (%s executor)",
            len(edge_list),
            len(partitions),
            self.config.executor,
        )
        executor = self._create_executor()
        try:
            index, aggregates = build_redirect_index_with_stats(
                edge_list,
                self.config.num_partitions,
                executor,
                partitions=partitions,
            )
            results = self._resolve_partitions(index, partitions, executor)
        finally:
            if executor is not None:
                executor.shutdown(wait=True)

        resolved = [edge for result in results for edge in result.edges]
        maps = emit_resolution_maps(resolved)
        stats = ResolutionStats(
            input_edges=len(edge_list),
            index_size=len(index),
            malformed_edges=sum(item.malformed for item in aggregates),
            duplicate_sources=sum(item.duplicates for item in aggregates),
            resolved_edges=len(maps.forward),
            cycles=sum(result.cycles for result in results),
            depth_limited=sum(result.depth_limited for result in results),
            max_hops=max((edge.hops for edge in resolved), default=0),
            partitions=len(partitions),
            hop_counts=[edge.hops for edge in resolved],
        )
        if stats.cycles or stats.depth_limited:
            LOGGER.warning(
                "Redirect resolution stopped early for %s cyclic and %s over-deep chains",
                stats.cycles,
                stats.depth_limited,
            )
        LOGGER.info(
            "Resolved %s redirects onto %s canonical titles",
            len(maps.forward),
            len(maps.reverse),
        )
        return RedirectResolution(maps=maps, stats=stats, index=index)

    def _create_executor(self) -> Optional[Executor]:
        kind = self.config.executor
        if kind == "serial":
            return None
        workers = self.config.max_workers or self.config.num_partitions
        if kind == "process":
            return ProcessPoolExecutor(max_workers=workers)
        return ThreadPoolExecutor(max_workers=workers, thread_name_prefix="redirects")

    def _resolve_partitions(
        self,
        index: Optional[RedirectIndex],
        partitions: Sequence[List[RedirectEdge]],
        executor: Optional[Executor],
    ) -> List[PartitionResult]:
        if index is None:
            raise RedirectIndexUnavailableError("Redirect index is not available")
        if executor is None:
            return [
                self._resolve_with_retry(index, part, number, None)
                for number, part in enumerate(partitions)
            ]
        futures = [
            executor.submit(resolve_partition, index, part, self.config.max_depth, number)
            for number, part in enumerate(partitions)
        ]
        return [
            self._collect(future, index, partitions[number], number, executor)
            for number, future in enumerate(futures)
        ]

    def _collect(
        self,
        future: Future,
        index: RedirectIndex,
        part: List[RedirectEdge],
        number: int,
        executor: Executor,
    ) -> PartitionResult:
        try:
            return future.result()
        except Exception as exc:
            LOGGER.warning("Partition %s failed (%s); recomputing from the shared index", number, exc)
            return self._resolve_with_retry(index, part, number, executor, attempts=1)

    def _resolve_with_retry(
        self,
        index: RedirectIndex,
        part: List[RedirectEdge],
        number: int,
        executor: Optional[Executor],
        attempts: int = 2,
    ) -> PartitionResult:
        last_error: Optional[Exception] = None
        for _ in range(attempts):
            try:
                if executor is None:
                    return resolve_partition(index, part, self.config.max_depth, number)
                return executor.submit(
                    resolve_partition, index, part, self.config.max_depth, number
                ).result()
            except Exception as exc:
                last_error = exc
                LOGGER.warning("Partition %s failed: %s", number, exc)
        raise RedirectResolutionError(number, f"resolution failed: {last_error}") from last_error


def _as_edge(edge: Any) -> RedirectEdge:
    if isinstance(edge, RedirectEdge):
        return edge
    try:
        source, target = edge
    except (TypeError, ValueError):
        LOGGER.debug("Unpackable redirect edge %r", edge)
        return RedirectEdge(None, None)
    return RedirectEdge(source, target)


def resolve_redirects(
    edges: Iterable[RedirectEdge | Tuple[str, str]],
    config: Optional[RedirectResolutionConfig] = None,
) -> Tuple[Dict[str, str], Dict[str, List[str]]]:
    """Resolve ``(source, target)`` edges into forward and reverse maps."""
    resolution = RedirectResolutionEngine(config).run(edges)
    return resolution.maps.forward, resolution.maps.reverse
