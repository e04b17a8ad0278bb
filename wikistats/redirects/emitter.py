"""Publish resolved redirects keyed by source and by canonical title."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

import polars as pl  # type: ignore[import-not-found]

from ..data.models import ResolvedEdge


@dataclass(slots=True)
class ResolutionMaps:
    """Forward (source -> canonical) and reverse (canonical -> sources) views."""

    forward: Dict[str, str] = field(default_factory=dict)
    reverse: Dict[str, List[str]] = field(default_factory=dict)

    def aliases(self, canonical: str) -> List[str]:
        return list(self.reverse.get(canonical, []))

    def forward_pairs(self) -> List[tuple[str, str]]:
        return list(self.forward.items())

    def reverse_pairs(self) -> List[tuple[str, str]]:
        return [(canonical, source) for canonical, sources in self.reverse.items() for source in sources]

    def forward_frame(self) -> pl.DataFrame:
        return pl.DataFrame(
            {"source": list(self.forward.keys()), "canonical": list(self.forward.values())},
            schema={"source": pl.Utf8, "canonical": pl.Utf8},
        )

    def reverse_frame(self) -> pl.DataFrame:
        pairs = self.reverse_pairs()
        return pl.DataFrame(
            {
                "canonical": [canonical for canonical, _ in pairs],
                "source": [source for _, source in pairs],
            },
            schema={"canonical": pl.Utf8, "source": pl.Utf8},
        )


def emit_resolution_maps(resolved_edges: Iterable[ResolvedEdge]) -> ResolutionMaps:
    """Re-key resolved edges in both orientations.

    Every source contributes one forward entry and one reverse entry; a
    repeated source keeps its first resolution.
    """
    maps = ResolutionMaps()
    for edge in resolved_edges:
        if edge.source in maps.forward:
            continue
        maps.forward[edge.source] = edge.canonical
        maps.reverse.setdefault(edge.canonical, []).append(edge.source)
    return maps
