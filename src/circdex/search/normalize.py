"""Title analysis for the fulltext title field.

Titles are split on whitespace, stopwords for the configured language are
dropped, and the Snowball stems of the remaining words are appended.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

import snowballstemmer
from stop_words import StopWordError, get_stop_words

logger = logging.getLogger(__name__)

# ISO 639-1 code -> Snowball algorithm name
_SNOWBALL_LANGUAGES: dict[str, str] = {
    "da": "danish",
    "de": "german",
    "en": "english",
    "es": "spanish",
    "fi": "finnish",
    "fr": "french",
    "it": "italian",
    "nl": "dutch",
    "no": "norwegian",
    "pt": "portuguese",
    "ru": "russian",
    "sv": "swedish",
}


class AnalyzerInitError(RuntimeError):
    """Fatal failure while preparing the title analyzer."""


class StemmerInitError(AnalyzerInitError):
    """The Snowball stemmer could not be constructed for a language."""


class StopwordsInitError(AnalyzerInitError):
    """The stopword list could not be loaded for a language."""


def load_stopwords(language: str) -> frozenset[str]:
    try:
        return frozenset(get_stop_words(language))
    except StopWordError as exc:
        raise StopwordsInitError(f"No stopword list for language '{language}': {exc}") from exc


def build_stemmer(language: str):
    algorithm = _SNOWBALL_LANGUAGES.get(language, language)
    try:
        return snowballstemmer.stemmer(algorithm)
    except KeyError as exc:
        raise StemmerInitError(f"No Snowball stemmer for language '{language}'") from exc


@dataclass(frozen=True, slots=True)
class TitleNormalizer:
    """Stopword filter plus Snowball stemmer for one language.

    Built once per pipeline run and shared by every record.
    """

    language: str
    stopwords: frozenset[str]
    stemmer: object

    @classmethod
    def create(cls, language: str = "en") -> "TitleNormalizer":
        stopwords = load_stopwords(language)
        stemmer = build_stemmer(language)
        logger.debug("Loaded %d stopwords and Snowball stemmer for '%s'", len(stopwords), language)
        return cls(language=language, stopwords=stopwords, stemmer=stemmer)

    def remove_stopwords(self, tokens: list[str]) -> list[str]:
        # Exact membership: the lists are lower-case and titles are not folded.
        return [token for token in tokens if token not in self.stopwords]

    def normalize(self, title: str) -> list[str]:
        """Return surviving title tokens followed by their stems.

        Parameters
        ----------
        title:
            Raw title text; split on runs of whitespace, casing preserved.
        """
        words = self.remove_stopwords(title.split())
        stems = self.stemmer.stemWords(words)
        return words + list(stems)
