"""Content moderation: severity classification and masking of abusive text."""

import re
from enum import Enum
from typing import Iterable, Optional, Sequence

# Literal phrases, matched case-insensitively anywhere in the text
BANNED_WORDS: tuple[str, ...] = (
    # Profanity
    "fuck", "shit", "bitch", "ass", "damn", "bastard", "crap", "dick", "cock", "pussy",
    "whore", "slut", "fag", "faggot", "nigger", "nigga", "retard", "retarded",
    # Hate speech
    "kill yourself", "kys", "go die", "hope you die",
    # Harassment
    "ugly bitch", "fat ass", "stupid idiot",
    # Sexual
    "send nudes", "sex", "porn", "nude", "naked",
    # Swahili profanity
    "malaya", "mavi", "matako", "shenzi", "mjinga",
)

# Less severe; informational only and matched as whole words
FLAGGED_WORDS: tuple[str, ...] = (
    "hate", "kill", "die", "stupid", "idiot", "dumb", "ugly", "fat", "loser",
)

# Evasion patterns: repeated letters, leetspeak, spaced-out letters
ABUSE_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"\bk+y+s+\b", re.IGNORECASE),
    re.compile(r"\bk+\s+y+\s*s+\b", re.IGNORECASE),
    re.compile(r"\bk+y+\s+s+\b", re.IGNORECASE),
    re.compile(r"\bf+u+c+k+", re.IGNORECASE),
    re.compile(r"\bs+h+i+t+", re.IGNORECASE),
    re.compile(r"\bn+[i1]+g+[g@]+[a@e]+r?", re.IGNORECASE),
    re.compile(r"\bf+[a@]+g+[o0]+t?", re.IGNORECASE),
)

_BANNED_WORD_PATTERNS: tuple[re.Pattern, ...] = tuple(
    re.compile(re.escape(word), re.IGNORECASE) for word in BANNED_WORDS
)
_FLAGGED_WORD_PATTERNS: tuple[re.Pattern, ...] = tuple(
    re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE) for word in FLAGGED_WORDS
)

# Group chat is for conversation, not trade
DEFAULT_SELLING_WORDS: tuple[str, ...] = (
    "sell", "selling", "for sale", "buy", "buying", "price", "pricing",
    "dm me", "dm for", "contact me", "payment", "pay", "cash",
    "₦", "naira", "dollar", "$", "offer", "discount",
    "available", "in stock", "order", "purchase", "checkout",
    "whatsapp", "instagram", "ig", "check my", "link in bio",
)

MASK_CHAR = "*"


class Severity(Enum):
    """Moderation verdict for a piece of text."""

    SAFE = "safe"
    FLAGGED = "flagged"
    BLOCKED = "blocked"


def contains_abusive_content(text: str) -> bool:
    """Check if text contains a banned phrase or matches an evasion pattern."""
    if not text:
        return False

    lowered = text.lower()
    if any(word in lowered for word in BANNED_WORDS):
        return True

    return any(pattern.search(text) for pattern in ABUSE_PATTERNS)


def contains_flagged_content(text: str) -> bool:
    """Check if text contains a less severe word, matched as a whole word."""
    if not text:
        return False
    return any(pattern.search(text) for pattern in _FLAGGED_WORD_PATTERNS)


def classify(text: str) -> Severity:
    """
    Map free text to a severity verdict.

    Args:
        text: Text to evaluate.

    Returns:
        BLOCKED for banned phrases or evasion patterns, FLAGGED for
        less severe whole words, SAFE otherwise.

    Examples:
        >>> classify("see you at the library")
        <Severity.SAFE: 'safe'>
        >>> classify("that exam was stupid")
        <Severity.FLAGGED: 'flagged'>
    """
    if contains_abusive_content(text):
        return Severity.BLOCKED
    if contains_flagged_content(text):
        return Severity.FLAGGED
    return Severity.SAFE


def _mask(match: re.Match) -> str:
    return MASK_CHAR * len(match.group(0))


def _mask_once(text: str) -> str:
    # Literal phrases first, then patterns, each on the previous step's output
    for pattern in _BANNED_WORD_PATTERNS:
        text = pattern.sub(_mask, text)
    for pattern in ABUSE_PATTERNS:
        text = pattern.sub(_mask, text)
    return text


def filter_content(text: str) -> str:
    """
    Replace every banned phrase and evasion-pattern match with asterisks.

    The output has the same length as the input. Masking can expose new word
    boundaries, so passes repeat until nothing changes; the result is stable
    under a second call.
    """
    if not text:
        return text

    filtered = text
    while True:
        masked = _mask_once(filtered)
        if masked == filtered:
            return masked
        filtered = masked


def find_banned_words(text: str, banned_words: Optional[Iterable[str]] = None) -> list[str]:
    """
    Return the entries of ``banned_words`` found in ``text``.

    Matching is a case-insensitive substring test. Defaults to the group
    chat selling list.
    """
    words: Sequence[str] = tuple(banned_words) if banned_words is not None else DEFAULT_SELLING_WORDS
    if not text:
        return []

    lowered = text.lower()
    return [word for word in words if word and word.lower() in lowered]


def contains_banned_words(text: str, banned_words: Optional[Iterable[str]] = None) -> bool:
    return bool(find_banned_words(text, banned_words))
