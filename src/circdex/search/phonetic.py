"""Double-metaphone fingerprints for sounds-like title matching."""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from metaphone import doublemetaphone


def phonetic_codes(tokens: Iterable[str]) -> Counter[str]:
    """Count the non-empty primary and alternate codes of every token."""

    codes: Counter[str] = Counter()
    for token in tokens:
        for code in doublemetaphone(token):
            if code:
                codes[code] += 1
    return codes


def fingerprint(tokens: Iterable[str]) -> str:
    """Serialize the distinct phonetic codes of ``tokens`` as one field value.

    Codes are sorted so the same title always yields the same string.
    """

    return " ".join(sorted(phonetic_codes(tokens)))
