"""Text analyzers for the projects index.

Analysis mirrors what the document-search engine does with the mapping
produced by ``FieldConfiguration.mapping()``: ``standard`` text is
lowercased and split on punctuation, ``stemming`` additionally drops
English stopwords and applies the Porter stemmer, and ``keyword``/``exact``
fields keep the whole value as one case-sensitive token.
"""

import re
import unicodedata
from abc import ABC, abstractmethod
from dataclasses import dataclass

from whoosh.lang.porter import stem as porter_stem
from whoosh.lang.stopwords import stoplists

from .fields import PROJECT_SCHEMA, FieldConfiguration

_SEPARATORS = re.compile(r'[-_,;.:!?&/\\(){}[\]"\'`~@#$%^*+=|<>]')
_WORD = re.compile(r"\w+")


@dataclass
class AnalyzerConfig:
    """Configuration for text analysis pipeline."""

    lowercase: bool = True
    remove_accents: bool = False
    remove_stopwords: bool = False
    stem: bool = False
    stopwords: frozenset[str] | None = None

    def __post_init__(self):
        if self.stopwords is None and self.remove_stopwords:
            self.stopwords = frozenset(stoplists["en"])


class TextProcessor:
    """Configurable tokenization pipeline."""

    def __init__(self, config: AnalyzerConfig | None = None):
        self.config = config or AnalyzerConfig()

    def process(self, text: str) -> list[str]:
        """Run text through the pipeline and return its tokens."""
        if not text:
            return []

        config = self.config
        if config.remove_accents:
            text = self._remove_accents(text)

        tokens = []
        for token in self._tokenize(text):
            if config.lowercase:
                token = token.lower()
            if config.stopwords and token.lower() in config.stopwords:
                continue
            if config.stem:
                token = self._stem(token)
            tokens.append(token)
        return tokens

    def _tokenize(self, text: str) -> list[str]:
        return _WORD.findall(_SEPARATORS.sub(" ", text))

    def _remove_accents(self, text: str) -> str:
        nfd = unicodedata.normalize("NFD", text)
        return "".join(char for char in nfd if unicodedata.category(char) != "Mn")

    def _stem(self, word: str) -> str:
        """Apply Porter stemming, leaving very short words alone."""
        if len(word) <= 3:
            return word
        stemmed = porter_stem(word)
        return stemmed if len(stemmed) >= 2 else word


class TextAnalyzer(ABC):
    """Abstract base class for text analyzers."""

    @abstractmethod
    def analyze(self, text: str) -> list[str]:
        """Analyze text and return list of tokens."""


class StandardAnalyzer(TextAnalyzer):
    """Lowercasing word tokenizer."""

    def __init__(self):
        self.processor = TextProcessor(AnalyzerConfig(lowercase=True))

    def analyze(self, text: str) -> list[str]:
        return self.processor.process(text)


class StemmingAnalyzer(TextAnalyzer):
    """Snowball-style analysis: lowercase, stopwords removed, stemmed."""

    def __init__(self):
        self.processor = TextProcessor(
            AnalyzerConfig(
                lowercase=True,
                remove_accents=True,
                remove_stopwords=True,
                stem=True,
            )
        )

    def analyze(self, text: str) -> list[str]:
        return self.processor.process(text)


class KeywordAnalyzer(TextAnalyzer):
    """Treats the entire input as a single case-sensitive token."""

    def analyze(self, text: str) -> list[str]:
        if not text:
            return []
        return [text]


class AnalyzerManager:
    """Resolves the analyzer of each schema field."""

    def __init__(self, schema: FieldConfiguration | None = None):
        self.schema = schema or PROJECT_SCHEMA
        keyword = KeywordAnalyzer()
        self.analyzers: dict[str, TextAnalyzer] = {
            "standard": StandardAnalyzer(),
            "stemming": StemmingAnalyzer(),
            "keyword": keyword,
            "exact": keyword,
        }

    def get_analyzer(self, field: str) -> TextAnalyzer:
        """Get analyzer for a field; unknown fields use ``standard``."""
        name = self.schema.get_analyzer(field) or "standard"
        return self.analyzers.get(name, self.analyzers["standard"])

    def is_exact(self, field: str) -> bool:
        return isinstance(self.get_analyzer(field), KeywordAnalyzer)

    def analyze_field(self, field: str, text: str) -> list[str]:
        """Analyze text for a specific field."""
        return self.get_analyzer(field).analyze(text)
