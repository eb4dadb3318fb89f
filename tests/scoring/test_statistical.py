"""
StatisticalAnalyzer のテスト

各シグナル（語彙比率・文長分散・AIフレーズ・語長・段落長）の発火条件と
決定性・単調性を確認する。
"""

import pytest

from truecheck_core.detector_config import StatisticalConfig
from truecheck_core.domain.errors import ValidationError
from truecheck_core.domain.value_objects import Severity
from truecheck_core.scoring.statistical import (
    MAX_PHRASE_POINTS,
    StatisticalAnalyzer,
    find_ai_phrases,
    phrase_points,
    strip_ai_phrases,
)

HUMAN_TEXT = "My dog ate the whole cake yesterday. I laughed so hard that I cried."

PHRASE_TEXT = (
    "Furthermore, the results were good. Moreover, the team was happy. "
    "In conclusion, we won."
)

REPETITIVE_TEXT = " ".join(["This text has repetitive patterns."] * 7)


def _types(result) -> set[str]:
    return {ind.type for ind in result.indicators}


class TestFindAIPhrases:
    """find_ai_phrases のテスト"""

    def test_case_insensitive(self):
        assert "furthermore" in find_ai_phrases("FURTHERMORE, we left", "en")

    def test_multi_word_phrase(self):
        assert "it is important to note" in find_ai_phrases(
            "it is important to note the risk", "en"
        )

    def test_word_boundary(self):
        """単語の一部にはマッチしない"""
        assert find_ai_phrases("Thusly spoke the man", "en") == []
        assert find_ai_phrases("A assimilação foi rápida", "pt") == []

    def test_portuguese_phrases(self):
        found = find_ai_phrases("Além disso, portanto, em resumo", "pt")
        assert set(found) == {"além disso", "portanto", "em resumo"}

    def test_distinct_phrases_counted_once(self):
        assert find_ai_phrases("however, however, however", "en") == ["however"]

    def test_unsupported_language(self):
        with pytest.raises(ValidationError):
            find_ai_phrases("hola", "es")


class TestPhrasePoints:
    """phrase_points のテスト"""

    def test_at_threshold_is_zero(self):
        assert phrase_points(2, threshold=2) == 0

    def test_above_threshold(self):
        assert phrase_points(3, threshold=2) == 24

    def test_capped(self):
        assert phrase_points(10, threshold=2) == MAX_PHRASE_POINTS

    def test_non_decreasing(self):
        """ヒット数が増えてもスコアは下がらない"""
        points = [phrase_points(h, threshold=2) for h in range(0, 25)]
        assert points == sorted(points)


class TestStatisticalAnalyzer:
    """StatisticalAnalyzer.analyze のテスト"""

    def setup_method(self):
        self.analyzer = StatisticalAnalyzer(StatisticalConfig())

    def test_human_text_scores_zero(self):
        result = self.analyzer.analyze(HUMAN_TEXT, "en")
        assert result.score == 0
        assert result.indicators == ()
        assert result.suspicious_parts == ()

    def test_ai_phrases_signal(self):
        result = self.analyzer.analyze(PHRASE_TEXT, "en")
        assert result.score == 24
        assert result.signals["ai_phrase_hits"] == 3
        assert _types(result) == {"ai_phrases"}

        indicator = result.indicators[0]
        assert indicator.severity == Severity.MEDIUM
        assert indicator.description == "3 AI-typical phrases found"

    def test_phrase_suspicious_parts(self):
        """マッチしたフレーズのうち最大2件が suspicious_parts になる"""
        result = self.analyzer.analyze(PHRASE_TEXT, "en")
        assert len(result.suspicious_parts) == 2
        assert [p.text for p in result.suspicious_parts] == ["in conclusion", "furthermore"]
        assert all(p.score == 79 for p in result.suspicious_parts)

    def test_phrases_at_threshold_do_not_fire(self):
        text = "Furthermore, the results were good. Moreover, the team was happy."
        result = self.analyzer.analyze(text, "en")
        assert result.signals["ai_phrase_hits"] == 2
        assert "ai_phrases" not in _types(result)

    def test_repetitive_text(self):
        """語彙の少なさと文長の均一さが両方発火する"""
        result = self.analyzer.analyze(REPETITIVE_TEXT, "en")
        assert result.signals["vocabulary_ratio"] == pytest.approx(5 / 35, abs=1e-4)
        assert result.signals["sentence_variance"] == 0.0
        assert _types(result) == {"low_vocabulary_diversity", "uniform_sentences"}
        assert result.score == 45

    def test_vocabulary_needs_enough_words(self):
        """30語以下では語彙比率を評価しない"""
        text = " ".join(["same word here."] * 10)  # 30 words
        result = self.analyzer.analyze(text, "en")
        assert "low_vocabulary_diversity" not in _types(result)

    def test_unusual_word_length(self):
        result = self.analyzer.analyze("I a o u e y", "en")
        assert _types(result) == {"unusual_word_length"}
        assert result.score == 10
        assert result.indicators[0].severity == Severity.LOW

    def test_long_paragraph(self):
        text = " ".join(f"abc{i:03d}" for i in range(160))
        result = self.analyzer.analyze(text, "en")
        assert _types(result) == {"long_paragraphs"}
        assert result.score == 10

    def test_portuguese_descriptions(self):
        text = "Além disso, o projeto foi bom. Portanto, ganhamos. Em resumo, tudo certo."
        result = self.analyzer.analyze(text, "pt")
        assert result.signals["ai_phrase_hits"] == 3
        assert result.indicators[0].description == "3 frases típicas de IA encontradas"
        assert result.suspicious_parts[0].reason == "Frase comum em textos gerados por IA"

    def test_custom_thresholds(self):
        analyzer = StatisticalAnalyzer(StatisticalConfig(ai_phrase_threshold=5))
        result = analyzer.analyze(PHRASE_TEXT, "en")
        assert result.score == 0

    def test_deterministic(self):
        first = self.analyzer.analyze(REPETITIVE_TEXT, "en")
        second = self.analyzer.analyze(REPETITIVE_TEXT, "en")
        assert first == second

    def test_score_bounds(self):
        text = REPETITIVE_TEXT + " " + PHRASE_TEXT + " However, overall, thus, therefore."
        result = self.analyzer.analyze(text, "en")
        assert 0 <= result.score <= 100

    def test_metrics_attached(self):
        result = self.analyzer.analyze(HUMAN_TEXT, "en")
        assert result.metrics is not None
        assert result.metrics.word_count == 14

    def test_unsupported_language(self):
        with pytest.raises(ValidationError):
            self.analyzer.analyze(HUMAN_TEXT, "fr")


class TestPhraseMonotonicity:
    """フレーズ追加に対する StatisticalAnalyzer.analyze の単調性テスト"""

    def setup_method(self):
        self.analyzer = StatisticalAnalyzer(StatisticalConfig())

    def test_strip_ai_phrases(self):
        words = ["furthermore", "the", "cat", "as", "we", "can", "see"]
        assert strip_ai_phrases(words, "en") == ["the", "cat"]

    def test_added_phrase_keeps_word_length_signal(self):
        """フレーズを足しても語長シグナルが消えずスコアが下がらない"""
        base = self.analyzer.analyze("Furthermore, moreover, additionally the cat", "en")
        more = self.analyzer.analyze("Furthermore, moreover, additionally the cat as we can see", "en")
        assert base.signals["ai_phrase_hits"] == 3
        assert more.signals["ai_phrase_hits"] == 4
        assert base.score == 34
        assert more.score == 40
        assert "unusual_word_length" in _types(more)

    def test_score_non_decreasing_as_phrases_are_added(self):
        """フレーズを1つずつ足していってもスコアは単調非減少"""
        phrases = ["furthermore", "moreover", "additionally", "however", "overall", "thus", "therefore"]
        scores = []
        for n in range(len(phrases) + 1):
            text = " ".join(phrases[:n] + ["the cat sat on the mat"])
            scores.append(self.analyzer.analyze(text, "en").score)
        assert scores == sorted(scores)
        assert scores[-1] > scores[0]
