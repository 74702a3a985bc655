"""Tests for per-field text analysis."""

from projectsearch.search.indexing.analyzers import (
    AnalyzerConfig,
    AnalyzerManager,
    KeywordAnalyzer,
    StandardAnalyzer,
    StemmingAnalyzer,
    TextProcessor,
)


class TestTextProcessor:
    def test_default_pipeline_lowercases(self):
        assert TextProcessor().process("Hello World") == ["hello", "world"]

    def test_splits_on_punctuation(self):
        assert TextProcessor().process("react-redux/core") == ["react", "redux", "core"]

    def test_empty_text(self):
        assert TextProcessor().process("") == []

    def test_stopwords_loaded_on_demand(self):
        config = AnalyzerConfig(remove_stopwords=True)

        assert "the" in config.stopwords


class TestAnalyzers:
    """Test the analyzer variants."""

    def test_standard(self):
        assert StandardAnalyzer().analyze("The Web Framework") == [
            "the",
            "web",
            "framework",
        ]

    def test_stemming_drops_stopwords_and_stems(self):
        tokens = StemmingAnalyzer().analyze("The runs frameworks")

        assert "the" not in tokens
        assert "run" in tokens
        assert "framework" in tokens

    def test_short_words_not_stemmed(self):
        assert StemmingAnalyzer().analyze("ios") == ["ios"]

    def test_keyword_keeps_whole_value(self):
        assert KeywordAnalyzer().analyze("Help Wanted") == ["Help Wanted"]
        assert KeywordAnalyzer().analyze("") == []


class TestAnalyzerManager:
    def test_field_analyzers_follow_schema(self):
        manager = AnalyzerManager()

        assert isinstance(manager.get_analyzer("name"), StemmingAnalyzer)
        assert isinstance(manager.get_analyzer("repo_name"), StandardAnalyzer)
        assert isinstance(manager.get_analyzer("platform"), KeywordAnalyzer)

    def test_unknown_field_uses_standard(self):
        assert isinstance(AnalyzerManager().get_analyzer("other"), StandardAnalyzer)

    def test_exact_fields(self):
        manager = AnalyzerManager()

        assert manager.is_exact("exact_name")
        assert manager.is_exact("keywords_array")
        assert not manager.is_exact("description")

    def test_analyze_field(self):
        manager = AnalyzerManager()

        assert manager.analyze_field("platform", "NPM") == ["NPM"]
        assert manager.analyze_field("homepage", "https://Rails.org") == [
            "https",
            "rails",
            "org",
        ]
