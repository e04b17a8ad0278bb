"""Load JsonPedia article records into a polars DataFrame."""
from __future__ import annotations

import pathlib
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional

import polars as pl  # type: ignore[import-not-found]
import requests

from .models import RecordType
from ..utils.io import iter_jsonl_lines, read_jsonl
from ..utils.logging import get_logger

LOGGER = get_logger(__name__)

LINK_SCHEMA = pl.Struct(
    {
        "description": pl.Utf8,
        "start": pl.Int64,
        "end": pl.Int64,
        "id": pl.Utf8,
    }
)

PARAGRAPH_SCHEMA = pl.Struct(
    {
        "paraText": pl.Utf8,
        "links": pl.List(LINK_SCHEMA),
    }
)

WIKI_RECORD_SCHEMA = {
    "wid": pl.Int64,
    "wikiTitle": pl.Utf8,
    "type": pl.Utf8,
    "redirect": pl.Utf8,
    "wikiText": pl.Utf8,
    "links": pl.List(LINK_SCHEMA),
    "paragraphsLink": pl.List(PARAGRAPH_SCHEMA),
}


@dataclass(slots=True)
class JsonPediaConfig:
    """Where to read the JSON article dump from."""

    path: Optional[str | pathlib.Path] = None
    url: Optional[str] = None
    timeout: int = 60
    limit: Optional[int] = None

    def require_source(self) -> None:
        if not (self.path or self.url):
            raise ValueError("Either path or url must be provided")


class JsonPediaLoader:
    """Read one JSON object per article, as written by the JsonPedia dump parser."""

    def __init__(self, config: JsonPediaConfig):
        self.config = config
        self.session = requests.Session()

    def iter_records(self) -> Iterator[Dict[str, Any]]:
        self.config.require_source()
        if self.config.path:
            raw_records = read_jsonl(self.config.path, skip_invalid=True)
        else:
            raw_records = self._from_remote(self.config.url)
        produced = 0
        for raw in raw_records:
            if self.config.limit and produced >= self.config.limit:
                break
            record = normalize_record(raw)
            if record is None:
                continue
            yield record
            produced += 1

    def load_frame(self) -> pl.DataFrame:
        records = list(self.iter_records())
        LOGGER.info("Loaded %s wiki records", len(records))
        return records_to_frame(records)

    def _from_remote(self, url: str) -> Iterator[dict]:
        LOGGER.info("Downloading JSON dump from %s", url)
        response = self.session.get(url, timeout=self.config.timeout, stream=True)
        response.raise_for_status()
        lines = response.iter_lines(decode_unicode=True)
        yield from iter_jsonl_lines((line for line in lines if line), source=url, skip_invalid=True)


def records_to_frame(records: Iterable[Dict[str, Any]]) -> pl.DataFrame:
    """Build a frame with the fixed record schema; an empty input gives an empty frame."""
    return pl.DataFrame(list(records), schema=WIKI_RECORD_SCHEMA)


def normalize_record(raw: Any) -> Optional[Dict[str, Any]]:
    """Coerce a decoded JSON object to exactly the record schema's fields."""
    if not isinstance(raw, dict):
        LOGGER.warning("Skipping non-object record of type %s", type(raw).__name__)
        return None
    title = raw.get("wikiTitle")
    if not title:
        LOGGER.debug("Skipping record without a title: %s", raw.get("wid"))
        return None
    record_type = RecordType.parse(raw.get("type"))
    return {
        "wid": _as_int(raw.get("wid")),
        "wikiTitle": str(title),
        "type": record_type.value,
        "redirect": _as_str(raw.get("redirect")) if record_type is RecordType.REDIRECT else None,
        "wikiText": _as_str(raw.get("wikiText")) or "",
        "links": _normalize_links(raw.get("links")),
        "paragraphsLink": [
            {
                "paraText": _as_str(paragraph.get("paraText")),
                "links": _normalize_links(paragraph.get("links")),
            }
            for paragraph in raw.get("paragraphsLink") or []
            if isinstance(paragraph, dict)
        ],
    }


def _normalize_links(links: Any) -> List[Dict[str, Any]]:
    if not isinstance(links, list):
        return []
    return [
        {
            "description": _as_str(link.get("description")),
            "start": _as_int(link.get("start")),
            "end": _as_int(link.get("end")),
            "id": _as_str(link.get("id")),
        }
        for link in links
        if isinstance(link, dict)
    ]


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _as_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
