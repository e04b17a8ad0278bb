"""Follow redirect chains to the article they finally land on."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import List, Sequence, Set

from ..data.models import ChainTermination, RedirectEdge, ResolvedEdge
from ..utils.logging import get_logger
from .errors import MalformedEdgeError

LOGGER = get_logger(__name__)

DEFAULT_MAX_DEPTH = 100


class ChainResolver:
    """Resolve titles against a read-only redirect index.

    The walk stops at the first title that is not a redirect source. When the
    next hop would revisit a title already on the chain, the current title is
    returned, i.e. the last one before the cycle is re-entered. Walks longer
    than ``max_depth`` hops stop at the title reached at that depth.
    """

    def __init__(self, index: Mapping, max_depth: int = DEFAULT_MAX_DEPTH):
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self.index = index
        self.max_depth = max_depth

    def resolve(self, source: str) -> ResolvedEdge:
        current = source
        visited: Set[str] = {source}
        hops = 0
        while True:
            target = self.index.get(current)
            if target is None:
                return ResolvedEdge(source, current, hops, ChainTermination.CANONICAL)
            if target in visited:
                LOGGER.debug("Redirect cycle from %r re-enters at %r", source, target)
                return ResolvedEdge(source, current, hops, ChainTermination.CYCLE)
            visited.add(target)
            current = target
            hops += 1
            if hops >= self.max_depth:
                if current in self.index:
                    LOGGER.debug("Redirect chain from %r cut at depth %s", source, hops)
                    return ResolvedEdge(source, current, hops, ChainTermination.DEPTH_LIMIT)
                return ResolvedEdge(source, current, hops, ChainTermination.CANONICAL)

    def canonical(self, title: str) -> str:
        return self.resolve(title).canonical


@dataclass(slots=True)
class PartitionResult:
    """Resolved edges of one partition, in first-occurrence order."""

    partition: int
    edges: List[ResolvedEdge] = field(default_factory=list)
    malformed: int = 0
    cycles: int = 0
    depth_limited: int = 0


def resolve_partition(
    index: Mapping,
    edges: Sequence[RedirectEdge],
    max_depth: int = DEFAULT_MAX_DEPTH,
    partition: int = 0,
) -> PartitionResult:
    """Resolve each distinct source of a partition once.

    Malformed edges are counted and skipped; nothing in the partition's data
    makes this function raise.
    """
    resolver = ChainResolver(index, max_depth=max_depth)
    result = PartitionResult(partition=partition)
    seen: Set[str] = set()
    for edge in edges:
        try:
            edge.validate()
        except MalformedEdgeError as exc:
            LOGGER.debug("Skipping edge in partition %s: %s", partition, exc)
            result.malformed += 1
            continue
        if edge.source in seen:
            continue
        seen.add(edge.source)
        resolved = resolver.resolve(edge.source)
        if resolved.termination is ChainTermination.CYCLE:
            result.cycles += 1
        elif resolved.termination is ChainTermination.DEPTH_LIMIT:
            result.depth_limited += 1
        result.edges.append(resolved)
    return result
