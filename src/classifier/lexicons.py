"""Category lexicons for the InsightSnap classifier.

Each category maps keywords/phrases to an integer weight:
3 = strong signal, 2 = medium, 1 = weak. Keywords are matched as
lowercase substrings, so "bug" also matches "debugging".

The default lexicons are built once at import time and are read-only.
Use build_lexicons() to merge keyword overrides from the config file.
"""

from types import MappingProxyType
from typing import Mapping

from src.models import CATEGORIES, CONTENT, PAIN, TRENDING

Lexicon = Mapping[str, int]
Lexicons = Mapping[str, Lexicon]


def _tiered(strong: list[str], medium: list[str], weak: list[str]) -> dict[str, int]:
    """Flatten weight tiers into a keyword -> weight dict."""
    lexicon = {}
    for weight, keywords in ((3, strong), (2, medium), (1, weak)):
        for keyword in keywords:
            lexicon[keyword] = weight
    return lexicon


PAIN_LEXICON = _tiered(
    strong=[
        "problem", "issue", "frustrated", "hate", "terrible", "awful",
        "broken", "fail", "worst", "sucks", "disappointed", "angry",
        "upset", "complaint", "bug", "error", "glitch",
    ],
    medium=[
        "difficult", "hard", "struggle", "annoying", "slow", "expensive",
        "overpriced", "confused", "lost", "stuck",
    ],
    weak=["can't", "won't", "doesn't work", "help me", "fix this"],
)

TRENDING_LEXICON = _tiered(
    strong=[
        "trending", "viral", "breaking", "huge", "massive", "insane",
        "crazy", "amazing", "incredible", "game changer", "revolutionary",
    ],
    medium=[
        "popular", "hot", "new", "latest", "everyone", "all over",
        "everywhere", "just dropped", "breakthrough", "innovative",
    ],
    weak=["next level", "cutting edge"],
)

CONTENT_LEXICON = _tiered(
    strong=[
        "how to", "tutorial", "learn", "teach", "explain", "guide",
        "step by step", "tips", "tricks", "advice",
    ],
    medium=[
        "want to know", "help", "recommend", "suggest", "what is",
        "where to", "when to", "why", "best way",
    ],
    weak=["beginner", "advanced", "pro tip", "expert"],
)

# Words that signal an emotionally charged post
EMOTIONAL_WORDS = (
    "love", "hate", "amazing", "terrible", "awesome",
    "awful", "incredible", "horrible", "excited", "disappointed",
)


def freeze_lexicons(lexicons: Mapping[str, Mapping[str, int]]) -> Lexicons:
    """Return a read-only copy of a category -> lexicon mapping."""
    return MappingProxyType({
        category: MappingProxyType(dict(lexicons.get(category, {})))
        for category in CATEGORIES
    })


DEFAULT_LEXICONS: Lexicons = freeze_lexicons({
    PAIN: PAIN_LEXICON,
    TRENDING: TRENDING_LEXICON,
    CONTENT: CONTENT_LEXICON,
})


def build_lexicons(
    overrides: Mapping[str, Mapping[str, int]] | None = None,
    base: Lexicons = DEFAULT_LEXICONS,
) -> Lexicons:
    """Merge keyword overrides into the base lexicons.

    Args:
        overrides: {category: {keyword: weight}}. Keywords are lowercased;
            an existing keyword takes the new weight.
        base: Lexicons to start from.

    Returns:
        New read-only lexicons.

    Raises:
        ValueError: If a category is unknown or a weight is not a
            positive integer.
    """
    merged = {category: dict(base[category]) for category in CATEGORIES}

    for category, keywords in (overrides or {}).items():
        if category not in merged:
            raise ValueError(f"Unknown lexicon category: {category}")
        for keyword, weight in (keywords or {}).items():
            if not isinstance(weight, int) or isinstance(weight, bool) or weight < 1:
                raise ValueError(
                    f"Weight for '{keyword}' in {category} must be a positive integer, got {weight!r}"
                )
            keyword = str(keyword).strip().lower()
            if keyword:
                merged[category][keyword] = weight

    return freeze_lexicons(merged)
