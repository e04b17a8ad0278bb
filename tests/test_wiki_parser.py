from __future__ import annotations

from wikistats.data.jsonpedia_loader import normalize_record, records_to_frame
from wikistats.data.models import RedirectEdge
from wikistats.data.wiki_parser import WikiDumpParser
from wikistats.redirects.engine import RedirectResolutionConfig


def build_parser(records):
    return WikiDumpParser(records_to_frame(normalize_record(record) for record in records))


def test_redirect_edges_come_from_redirect_records(wiki_records):
    parser = build_parser(wiki_records)
    assert parser.redirect_edges() == [
        RedirectEdge("Deutschland", "Federal Republic of Germany"),
        RedirectEdge("Federal Republic of Germany", "Germany"),
        RedirectEdge("Capital of Germany", "Berlin"),
    ]


def test_resolved_redirects_in_both_orientations(wiki_records):
    parser = build_parser(wiki_records)
    config = RedirectResolutionConfig(num_partitions=2, executor="serial")
    forward = dict(parser.resolved_redirects(config))
    assert forward == {
        "Deutschland": "Germany",
        "Federal Republic of Germany": "Germany",
        "Capital of Germany": "Berlin",
    }
    reverse = parser.resolved_redirects_by_canonical(config)
    assert sorted(reverse) == [
        ("Berlin", "Capital of Germany"),
        ("Germany", "Deutschland"),
        ("Germany", "Federal Republic of Germany"),
    ]


def test_resolution_is_cached_per_config(wiki_records):
    parser = build_parser(wiki_records)
    config = RedirectResolutionConfig(executor="serial")
    assert parser.resolve_redirects(config) is parser.resolve_redirects(config)


def test_surface_forms_are_distinct_article_link_texts(wiki_records):
    parser = build_parser(wiki_records)
    assert parser.surface_forms() == ["capital", "Germany", "Infobox", "France"]


def test_article_texts_skip_empty_articles(wiki_records):
    texts = build_parser(wiki_records).article_texts()
    assert [text.wid for text in texts] == [10, 11]
    berlin = texts[0]
    assert berlin.text == "Berlin is the capital of Germany."
    assert [(occ.surface_form, occ.offset, occ.uri) for occ in berlin.occurrences][:2] == [
        ("capital", 14, "Capital_city"),
        ("Germany", 25, "Germany"),
    ]
    assert berlin.occurrences[0].spot_type == "real"


def test_surface_form_uris_drop_links_without_offsets(wiki_records):
    pairs = build_parser(wiki_records).surface_form_uris()
    assert [(pair.wid, pair.surface_form, pair.uri) for pair in pairs] == [
        (10, "capital", "Capital_city"),
        (10, "Germany", "Germany"),
        (11, "France", "France"),
        (11, "Germany", "Germany"),
    ]


def test_uri_paragraphs_join_distinct_paragraphs(wiki_records):
    paragraphs = dict(build_parser(wiki_records).uri_paragraphs())
    assert paragraphs["France"] == "Germany borders France."
    assert paragraphs["Germany"] == "Berlin is the capital of Germany. Germany borders France."


def test_surface_form_tokens(wiki_records):
    tokens = build_parser(wiki_records).surface_form_tokens()
    assert [token.token for token in tokens] == ["capital", "Germany", "Infobox", "France"]
    assert [token.id for token in tokens] == [1, 2, 3, 4]


def test_empty_frame_extracts_nothing():
    parser = build_parser([])
    assert parser.redirect_edges() == []
    assert parser.surface_forms() == []
    assert parser.surface_form_uris() == []
    assert parser.uri_paragraphs() == []
    assert parser.resolved_redirects(RedirectResolutionConfig(executor="serial")) == []
