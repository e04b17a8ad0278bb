import json

import pytest


WIKI_RECORDS = [
    {
        "wid": 10,
        "wikiTitle": "Berlin",
        "type": "ARTICLE",
        "wikiText": "Berlin is the capital of Germany.",
        "links": [
            {"description": "capital", "start": 14, "end": 21, "id": "Capital_city"},
            {"description": "Germany", "start": 25, "end": 32, "id": "Germany"},
            {"description": "Infobox", "start": 0, "end": 0, "id": "Template_link"},
        ],
        "paragraphsLink": [
            {
                "paraText": "Berlin is the capital of Germany.",
                "links": [{"description": "Germany", "start": 25, "end": 32, "id": "Germany"}],
            }
        ],
    },
    {
        "wid": 11,
        "wikiTitle": "Germany",
        "type": "ARTICLE",
        "wikiText": "Germany borders France.",
        "links": [
            {"description": "France", "start": 16, "end": 22, "id": "France"},
            {"description": "Germany", "start": 0, "end": 7, "id": "Germany"},
        ],
        "paragraphsLink": [
            {
                "paraText": "Germany borders France.",
                "links": [
                    {"description": "France", "start": 16, "end": 22, "id": "France"},
                    {"description": "Germany", "start": 0, "end": 7, "id": "Germany"},
                ],
            },
            {
                "paraText": "Berlin is the capital of Germany.",
                "links": [{"description": "Germany", "start": 25, "end": 32, "id": "Germany"}],
            },
        ],
    },
    {"wid": 12, "wikiTitle": "Empty page", "type": "ARTICLE", "wikiText": "", "links": []},
    {"wid": 20, "wikiTitle": "Deutschland", "type": "REDIRECT", "redirect": "Federal Republic of Germany"},
    {"wid": 21, "wikiTitle": "Federal Republic of Germany", "type": "REDIRECT", "redirect": "Germany"},
    {"wid": 22, "wikiTitle": "Capital of Germany", "type": "REDIRECT", "redirect": "Berlin"},
    {"wid": 30, "wikiTitle": "Category:Cities", "type": "CATEGORY"},
]


@pytest.fixture
def wiki_records():
    return [dict(record) for record in WIKI_RECORDS]


@pytest.fixture
def wiki_dump(tmp_path):
    path = tmp_path / "dump.jsonl"
    lines = [json.dumps(record) for record in WIKI_RECORDS]
    lines.insert(2, "{not json")
    lines.insert(3, "")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
