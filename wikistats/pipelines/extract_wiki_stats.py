"""End-to-end pipeline: load parsed wiki records, resolve redirects, write artifacts."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..analytics.metrics import compute_redirect_metrics
from ..data.jsonpedia_loader import JsonPediaConfig, JsonPediaLoader
from ..data.models import ArticleText, SurfaceFormUri, TokenType
from ..data.wiki_parser import WikiDumpParser
from ..redirects.emitter import ResolutionMaps
from ..redirects.engine import RedirectResolution, RedirectResolutionConfig
from ..utils.config import get_section, load_config
from ..utils.io import write_json, write_jsonl
from ..utils.logging import get_logger, set_log_level

LOGGER = get_logger(__name__)

DEFAULT_OUTPUTS = {
    "resolved_redirects": "artifacts/resolved_redirects.jsonl",
    "redirect_aliases": "artifacts/redirect_aliases.jsonl",
    "surface_forms": "artifacts/surface_forms.jsonl",
    "surface_form_uris": "artifacts/surface_form_uris.jsonl",
    "uri_paragraphs": "artifacts/uri_paragraphs.jsonl",
    "article_texts": "artifacts/article_texts.jsonl",
    "tokens": "artifacts/tokens.jsonl",
}


@dataclass(slots=True)
class WikiStatsResult:
    """Everything the pipeline extracted in one run."""

    resolution: Optional[RedirectResolution] = None
    surface_forms: List[str] = field(default_factory=list)
    surface_form_uris: List[SurfaceFormUri] = field(default_factory=list)
    uri_paragraphs: List[Tuple[str, str]] = field(default_factory=list)
    article_texts: List[ArticleText] = field(default_factory=list)
    tokens: List[TokenType] = field(default_factory=list)
    metrics: Dict[str, object] = field(default_factory=dict)


def run_pipeline(config_path: str | Path = "config/pipeline.yaml") -> WikiStatsResult:
    config = load_config(config_path)
    level = get_section(config, "logging").get("level")
    if level:
        set_log_level(level)

    loader = JsonPediaLoader(_loader_config(get_section(config, "data")))
    frame = loader.load_frame()
    if frame.height == 0:
        LOGGER.warning("No wiki records were loaded; aborting pipeline")
        return WikiStatsResult()

    parser = WikiDumpParser(frame)
    resolution = parser.resolve_redirects(
        RedirectResolutionConfig.from_dict(get_section(config, "redirects"))
    )
    surface_forms = parser.surface_forms()
    result = WikiStatsResult(
        resolution=resolution,
        surface_forms=surface_forms,
        surface_form_uris=parser.surface_form_uris(),
        uri_paragraphs=parser.uri_paragraphs(),
        article_texts=parser.article_texts(),
        tokens=parser.surface_form_tokens(surface_forms),
        metrics=compute_redirect_metrics(resolution),
    )
    LOGGER.info(
        "Extracted %s surface forms, %s sf/uri pairs, %s linked uris and %s articles",
        len(result.surface_forms),
        len(result.surface_form_uris),
        len(result.uri_paragraphs),
        len(result.article_texts),
    )

    outputs = {**DEFAULT_OUTPUTS, **get_section(config, "outputs")}
    _write_outputs(result, outputs)

    metrics_path = get_section(config, "analytics").get("metrics_path")
    if metrics_path:
        write_json(metrics_path, result.metrics)
        LOGGER.info("Redirect metrics saved to %s", metrics_path)
    return result


def _loader_config(data_cfg: Dict[str, Any]) -> JsonPediaConfig:
    return JsonPediaConfig(
        path=data_cfg.get("path"),
        url=data_cfg.get("url"),
        timeout=data_cfg.get("timeout", 60),
        limit=data_cfg.get("limit"),
    )


def _write_outputs(result: WikiStatsResult, outputs: Dict[str, Optional[str]]) -> None:
    maps = result.resolution.maps if result.resolution else ResolutionMaps()
    writers = {
        "resolved_redirects": lambda: [
            {"source": source, "canonical": canonical} for source, canonical in maps.forward_pairs()
        ],
        "redirect_aliases": lambda: [
            {"canonical": canonical, "sources": sources} for canonical, sources in maps.reverse.items()
        ],
        "surface_forms": lambda: [{"surface_form": surface_form} for surface_form in result.surface_forms],
        "surface_form_uris": lambda: [asdict(item) for item in result.surface_form_uris],
        "uri_paragraphs": lambda: [{"uri": uri, "paragraphs": para} for uri, para in result.uri_paragraphs],
        "article_texts": lambda: [asdict(article) for article in result.article_texts],
        "tokens": lambda: [asdict(token) for token in result.tokens],
    }
    for name, build_records in writers.items():
        path = outputs.get(name)
        if not path:
            LOGGER.debug("No output path configured for %s; skipping", name)
            continue
        write_jsonl(path, build_records())
