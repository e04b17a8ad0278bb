"""Language independent tokenization of surface forms."""
from __future__ import annotations

import re
from typing import Iterable, List

from ..data.models import TokenType

_TOKEN_PATTERN = re.compile(r"\w+(?:['’\-]\w+)*", re.UNICODE)


def tokenize_unstemmed(text: str) -> List[str]:
    """Split text into word tokens, keeping case and dropping punctuation."""
    if not text:
        return []
    return _TOKEN_PATTERN.findall(text)


def tokens_in_surface_forms(surface_forms: Iterable[str]) -> List[TokenType]:
    """Number every token of every surface form from 1.

    Repeated tokens get their own entries; counts are filled in later.
    """
    tokens = [token for surface_form in surface_forms for token in tokenize_unstemmed(surface_form)]
    return [TokenType(id=index, token=token, count=0) for index, token in enumerate(tokens, 1)]
