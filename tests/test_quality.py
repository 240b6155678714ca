"""Tests for extractability grading."""

from dnav.config import QualityConfig
from dnav.extract.quality import QualityAssessment, classify_quality, worst_tier

CLEAN_SENTENCE = "The company will expand production capacity at the new plant."


class TestClassifyQuality:
    """Tests for tier assignment."""

    def test_clean_text_is_tier_a(self) -> None:
        text = " ".join([CLEAN_SENTENCE] * 6)
        result = classify_quality(text, [text])
        assert result.tier == "A"
        assert "Clean" in result.reason

    def test_short_text_is_tier_c(self) -> None:
        result = classify_quality(CLEAN_SENTENCE, [CLEAN_SENTENCE])
        assert result.tier == "C"
        assert "scan" in result.reason

    def test_short_lines_are_tier_b(self) -> None:
        lines = ["Alpha beta gamma"] * 50
        text = "\n".join(lines)
        result = classify_quality(text, lines)
        assert result.tier == "B"
        assert "Layout-heavy" in result.reason

    def test_dense_newlines_are_tier_b(self) -> None:
        lines = [f"{CLEAN_SENTENCE} {index}" for index in range(10)]
        text = "\n".join(lines)
        config = QualityConfig(max_newline_density=0.001)
        assert classify_quality(text, lines, config).tier == "B"

    def test_config_thresholds(self) -> None:
        text = " ".join([CLEAN_SENTENCE] * 6)
        config = QualityConfig(min_tokens=1000)
        assert classify_quality(text, [text], config).tier == "C"


class TestWorstTier:
    """Tests for folding page tiers into a document tier."""

    def test_first_page(self) -> None:
        page = QualityAssessment(tier="B", reason="layout")
        assert worst_tier(None, page) is page

    def test_lower_tier_wins(self) -> None:
        clean = QualityAssessment(tier="A", reason="clean")
        scanned = QualityAssessment(tier="C", reason="scan")
        assert worst_tier(clean, scanned) is scanned
        assert worst_tier(scanned, clean) is scanned
