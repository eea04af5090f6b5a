"""Tests for content classification and filtering."""

from comradezone.moderation import (
    BANNED_WORDS,
    FLAGGED_WORDS,
    MASK_CHAR,
    Severity,
    classify,
    contains_abusive_content,
    contains_banned_words,
    contains_flagged_content,
    filter_content,
    find_banned_words,
)


class TestClassify:
    """Test severity verdicts."""

    def test_banned_words_block_in_any_case(self):
        """Every literal banned phrase blocks, whatever its case."""
        for word in BANNED_WORDS:
            for variant in (word, word.upper(), word.title()):
                text = f"well {variant} then"
                assert classify(text) is Severity.BLOCKED, text

    def test_flagged_words_flag(self):
        """Whole flagged words give FLAGGED when nothing is banned."""
        for word in FLAGGED_WORDS:
            text = f"this is {word} today"
            assert classify(text) is Severity.FLAGGED, text

    def test_flagged_words_need_word_boundary(self):
        """Flagged words inside longer words do not count."""
        assert contains_flagged_content("I'm on a diet") is False
        assert classify("I'm on a diet") is Severity.SAFE

    def test_safe_text(self):
        """Ordinary text is safe."""
        assert classify("See you at the library after lunch") is Severity.SAFE
        assert classify("") is Severity.SAFE

    def test_repeated_letter_evasion(self):
        """Stretched spellings are caught by the evasion patterns."""
        assert classify("kyyysss") is Severity.BLOCKED
        assert classify("shiiiit happens") is Severity.BLOCKED
        assert classify("FUUUCK this exam") is Severity.BLOCKED

    def test_spaced_out_evasion(self):
        """Spacing letters apart does not slip past the classifier."""
        assert contains_abusive_content("you should just ky s already") is True
        assert classify("you should just ky s already") is Severity.BLOCKED
        assert classify("k y s") is Severity.BLOCKED

    def test_blocked_wins_over_flagged(self):
        """Text with both lists is blocked."""
        assert classify("stupid idiot") is Severity.BLOCKED


class TestFilterContent:
    """Test masking of abusive spans."""

    def test_masks_literal_words_preserving_length(self):
        """Literal matches become asterisks of equal length."""
        assert filter_content("What the FUCK") == "What the ****"

    def test_masks_pattern_matches(self):
        """Pattern matches are masked after the literal pass."""
        assert filter_content("fuuuuck off") == "******* off"

    def test_safe_text_unchanged(self):
        """Safe text passes through untouched."""
        text = "Meet at the cafeteria at 5"
        assert filter_content(text) == text

    def test_length_and_mask_character(self):
        """Output length always matches and only asterisks are introduced."""
        samples = [
            "Ünïcode shit ✓",
            "kys kys kys",
            "you should just ky s already",
            "send nudes or go die",
            "plain words only",
        ]
        for text in samples:
            filtered = filter_content(text)
            assert len(filtered) == len(text)
            for original, masked in zip(text, filtered):
                assert masked == original or masked == MASK_CHAR

    def test_idempotent(self):
        """Filtering filtered text changes nothing."""
        samples = [
            "asskys",
            "shitfuuuck",
            "hope you die, kyyys",
            "totally fine message",
        ]
        for text in samples:
            once = filter_content(text)
            assert filter_content(once) == once

    def test_filtered_text_is_not_blocked(self):
        """Once masked, literal words no longer trigger the classifier."""
        assert contains_abusive_content(filter_content("this is shit")) is False


class TestSellingWords:
    """Test the group chat selling filter."""

    def test_default_list_finds_words_in_order(self):
        """Found words are reported in list order."""
        found = find_banned_words("Selling my laptop, DM me")
        assert found == ["sell", "selling", "dm me"]

    def test_custom_list(self):
        """A caller-supplied list replaces the default."""
        assert contains_banned_words("Free hoodie giveaway", ["hoodie"]) is True
        assert contains_banned_words("Free hoodie giveaway", ["jacket"]) is False

    def test_empty_text(self):
        """Empty text contains nothing."""
        assert find_banned_words("") == []
