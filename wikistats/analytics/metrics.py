"""Aggregation helpers summarising a redirect resolution run."""
from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from statistics import median
from typing import Dict

from ..redirects.engine import RedirectResolution


def compute_redirect_metrics(resolution: RedirectResolution) -> Dict[str, object]:
    """Compute aggregate metrics for a :class:`RedirectResolution`.

    The returned dictionary is JSON-serialisable.
    """
    stats = resolution.stats
    maps = resolution.maps
    metrics: Dict[str, object] = {
        "metadata": {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "input_edges": stats.input_edges,
            "partitions": stats.partitions,
        },
        "index": {
            "size": stats.index_size,
            "malformed_edges": stats.malformed_edges,
            "duplicate_sources": stats.duplicate_sources,
        },
    }

    if not maps.forward:
        metrics.update(
            {
                "resolution": {
                    "resolved_edges": 0,
                    "canonical_targets": 0,
                    "cycles": 0,
                    "depth_limited": 0,
                },
                "hops": {"max": 0, "median": 0.0, "distribution": {}},
                "largest_alias_groups": [],
            }
        )
        return metrics

    hop_distribution = Counter(stats.hop_counts)
    alias_groups = sorted(
        ((canonical, len(sources)) for canonical, sources in maps.reverse.items()),
        key=lambda item: (-item[1], item[0]),
    )
    metrics.update(
        {
            "resolution": {
                "resolved_edges": stats.resolved_edges,
                "canonical_targets": len(maps.reverse),
                "cycles": stats.cycles,
                "depth_limited": stats.depth_limited,
            },
            "hops": {
                "max": stats.max_hops,
                "median": float(median(stats.hop_counts)) if stats.hop_counts else 0.0,
                "distribution": {str(hops): count for hops, count in sorted(hop_distribution.items())},
            },
            "largest_alias_groups": [
                {"canonical": canonical, "aliases": count} for canonical, count in alias_groups[:10]
            ],
        }
    )
    return metrics
