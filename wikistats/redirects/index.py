"""Build the immutable redirect index from partitioned redirect edges."""
from __future__ import annotations

import zlib
from collections.abc import Mapping
from concurrent.futures import Executor
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from ..data.models import RedirectEdge
from ..utils.logging import get_logger
from .errors import MalformedEdgeError, RedirectIndexUnavailableError

LOGGER = get_logger(__name__)


class RedirectIndex(Mapping):
    """Read-only mapping from a redirect source to its immediate target.

    The backing dict is private and never handed out, so an index can be
    shared between worker threads without locking and pickled to worker
    processes.
    """

    __slots__ = ("_targets",)

    def __init__(self, targets: Optional[Dict[str, str]] = None):
        self._targets: Dict[str, str] = dict(targets or {})

    def __getitem__(self, source: str) -> str:
        return self._targets[source]

    def __iter__(self) -> Iterator[str]:
        return iter(self._targets)

    def __len__(self) -> int:
        return len(self._targets)

    def __contains__(self, source: object) -> bool:
        return source in self._targets

    def __repr__(self) -> str:
        return f"RedirectIndex(size={len(self._targets)})"

    def __getstate__(self):
        return (self._targets,)

    def __setstate__(self, state):
        (self._targets,) = state


@dataclass(slots=True)
class PartitionAggregate:
    """Partition-local view of the redirect edges."""

    partition: int
    targets: Dict[str, str] = field(default_factory=dict)
    malformed: int = 0
    duplicates: int = 0


def partition_of(source: str, num_partitions: int) -> int:
    """Stable partition number for a source title."""
    return zlib.crc32(source.encode("utf-8")) % num_partitions


def partition_edges(edges: Iterable[RedirectEdge], num_partitions: int) -> List[List[RedirectEdge]]:
    """Split edges horizontally by source so repeated sources share a partition.

    Edges without a usable source go to partition 0, where they are dropped as
    malformed like any other.
    """
    if num_partitions < 1:
        raise ValueError("num_partitions must be at least 1")
    partitions: List[List[RedirectEdge]] = [[] for _ in range(num_partitions)]
    for edge in edges:
        if isinstance(edge.source, str) and edge.source:
            partitions[partition_of(edge.source, num_partitions)].append(edge)
        else:
            partitions[0].append(edge)
    return partitions


def aggregate_partition(edges: Sequence[RedirectEdge], partition: int = 0) -> PartitionAggregate:
    """Collect one partition's edges into a local map; later edges overwrite earlier ones."""
    aggregate = PartitionAggregate(partition=partition)
    for edge in edges:
        try:
            edge.validate()
        except MalformedEdgeError as exc:
            LOGGER.debug("Dropping edge: %s", exc)
            aggregate.malformed += 1
            continue
        previous = aggregate.targets.get(edge.source)
        if previous is not None and previous != edge.target:
            aggregate.duplicates += 1
            LOGGER.debug(
                "Redirect source %r seen with targets %r and %r; keeping the latter",
                edge.source,
                previous,
                edge.target,
            )
        aggregate.targets[edge.source] = edge.target
    return aggregate


def merge_partitions(aggregates: Iterable[PartitionAggregate]) -> RedirectIndex:
    """Combine partition maps in partition order into one frozen index."""
    merged: Dict[str, str] = {}
    for aggregate in sorted(aggregates, key=lambda item: item.partition):
        merged.update(aggregate.targets)
    return RedirectIndex(merged)


def build_redirect_index(
    edges: Iterable[RedirectEdge],
    num_partitions: int = 1,
    executor: Optional[Executor] = None,
) -> RedirectIndex:
    """Build the shared index from the complete edge set.

    Partition-local aggregation runs on ``executor`` when one is given. Any
    failure on the way is reported as :class:`RedirectIndexUnavailableError`.
    """
    index, _ = build_redirect_index_with_stats(edges, num_partitions, executor)
    return index


def build_redirect_index_with_stats(
    edges: Iterable[RedirectEdge],
    num_partitions: int = 1,
    executor: Optional[Executor] = None,
    partitions: Optional[List[List[RedirectEdge]]] = None,
) -> tuple[RedirectIndex, List[PartitionAggregate]]:
    """Same as :func:`build_redirect_index`, also returning the partition aggregates."""
    try:
        if partitions is None:
            partitions = partition_edges(edges, num_partitions)
        if executor is None:
            aggregates = [aggregate_partition(part, number) for number, part in enumerate(partitions)]
        else:
            futures = [
                executor.submit(aggregate_partition, part, number)
                for number, part in enumerate(partitions)
            ]
            aggregates = [future.result() for future in futures]
        index = merge_partitions(aggregates)
    except Exception as exc:
        raise RedirectIndexUnavailableError(f"Failed to build redirect index: {exc}") from exc

    malformed = sum(item.malformed for item in aggregates)
    duplicates = sum(item.duplicates for item in aggregates)
    if malformed:
        LOGGER.warning("Dropped %s malformed redirect edges", malformed)
    if duplicates:
        LOGGER.warning(
            "%s redirect sources had conflicting targets; the last one seen was kept",
            duplicates,
        )
    LOGGER.info("Built redirect index with %s sources from %s partitions", len(index), len(aggregates))
    return index, aggregates
