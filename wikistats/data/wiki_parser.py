"""Extract redirects, surface forms, links and paragraphs from parsed wiki records."""
from __future__ import annotations

from typing import List, Optional, Tuple

import polars as pl  # type: ignore[import-not-found]

from .models import (
    ArticleText,
    RecordType,
    RedirectEdge,
    SurfaceFormOccurrence,
    SurfaceFormUri,
    TokenType,
)
from ..redirects.engine import RedirectResolution, RedirectResolutionConfig, RedirectResolutionEngine
from ..text.tokenize import tokens_in_surface_forms
from ..utils.logging import get_logger

LOGGER = get_logger(__name__)


class WikiDumpParser:
    """Thin filter/select layer over a frame of JsonPedia records."""

    def __init__(self, frame: pl.DataFrame):
        self.frame = frame
        self._resolution: Optional[RedirectResolution] = None
        self._resolution_config: Optional[RedirectResolutionConfig] = None

    def _articles(self) -> pl.DataFrame:
        return self.frame.filter(pl.col("type") == RecordType.ARTICLE.value)

    def redirect_edges(self) -> List[RedirectEdge]:
        rows = (
            self.frame.filter(pl.col("type") == RecordType.REDIRECT.value)
            .select("wikiTitle", "redirect")
            .iter_rows()
        )
        return [RedirectEdge(source, target) for source, target in rows]

    def resolve_redirects(self, config: Optional[RedirectResolutionConfig] = None) -> RedirectResolution:
        """Run redirect resolution once per config and reuse the result."""
        if self._resolution is None or config != self._resolution_config:
            self._resolution = RedirectResolutionEngine(config).run(self.redirect_edges())
            self._resolution_config = config
        return self._resolution

    def resolved_redirects(self, config: Optional[RedirectResolutionConfig] = None) -> List[Tuple[str, str]]:
        """``(source, canonical)`` pairs."""
        return self.resolve_redirects(config).maps.forward_pairs()

    def resolved_redirects_by_canonical(
        self, config: Optional[RedirectResolutionConfig] = None
    ) -> List[Tuple[str, str]]:
        """``(canonical, source)`` pairs."""
        return self.resolve_redirects(config).maps.reverse_pairs()

    def surface_forms(self) -> List[str]:
        """Distinct link anchor texts found in articles."""
        return (
            self._articles()
            .select("links")
            .explode("links")
            .unnest("links")
            .select("description")
            .drop_nulls()
            .unique(maintain_order=True)
            .get_column("description")
            .to_list()
        )

    def article_texts(self) -> List[ArticleText]:
        rows = (
            self._articles()
            .filter(pl.col("wikiText").fill_null("").str.len_chars() > 0)
            .select("wid", "wikiText", "links")
            .iter_rows(named=True)
        )
        texts: List[ArticleText] = []
        for row in rows:
            occurrences = [
                SurfaceFormOccurrence(
                    surface_form=link["description"],
                    offset=link["start"] or 0,
                    uri=link["id"],
                )
                for link in row["links"] or []
                if link and link.get("description") and link.get("id")
            ]
            texts.append(ArticleText(wid=row["wid"], text=row["wikiText"], occurrences=occurrences))
        return texts

    def surface_form_uris(self) -> List[SurfaceFormUri]:
        """Link anchors with their target, skipping links that carry no offsets."""
        rows = (
            self._articles()
            .select("wid", "links")
            .explode("links")
            .unnest("links")
            .drop_nulls(["description", "id"])
            .filter(~((pl.col("start").fill_null(0) == 0) & (pl.col("end").fill_null(0) == 0)))
            .select("wid", "description", "id")
            .iter_rows()
        )
        return [SurfaceFormUri(wid=wid, surface_form=description, uri=uri) for wid, description, uri in rows]

    def uri_paragraphs(self) -> List[Tuple[str, str]]:
        """Paragraph text per linked uri, distinct paragraphs joined by a space."""
        frame = (
            self.frame.select("paragraphsLink")
            .explode("paragraphsLink")
            .unnest("paragraphsLink")
            .explode("links")
            .unnest("links")
            .select(pl.col("id"), pl.col("paraText").alias("para"))
            .drop_nulls()
            .unique(maintain_order=True)
            .group_by("id", maintain_order=True)
            .agg(pl.col("para"))
            .with_columns(pl.col("para").list.join(" "))
        )
        return list(frame.iter_rows())

    def surface_form_tokens(self, surface_forms: Optional[List[str]] = None) -> List[TokenType]:
        if surface_forms is None:
            surface_forms = self.surface_forms()
        tokens = tokens_in_surface_forms(surface_forms)
        LOGGER.info("Tokenized %s surface forms into %s tokens", len(surface_forms), len(tokens))
        return tokens
