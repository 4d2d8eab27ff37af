"""Lexicon scoring.

A post scores the sum of weights of every distinct lexicon entry found in
its lowercased content. Repeating a phrase does not add to the score.
"""

from src.classifier.lexicons import DEFAULT_LEXICONS, Lexicon, Lexicons
from src.models import CATEGORIES


def match_keywords(text: str, lexicon: Lexicon) -> tuple[str, ...]:
    """Get the lexicon entries present in text.

    Args:
        text: Lowercased post content.
        lexicon: Keyword -> weight mapping.

    Returns:
        Matched keywords, in lexicon order.
    """
    if not text:
        return ()
    return tuple(keyword for keyword in lexicon if keyword in text)


def lexicon_score(text: str, lexicon: Lexicon) -> int:
    """Sum the weights of lexicon entries present in text."""
    return sum(lexicon[keyword] for keyword in match_keywords(text, lexicon))


def compute_lexicon_scores(
    content: str,
    lexicons: Lexicons = DEFAULT_LEXICONS,
) -> dict[str, int]:
    """Compute raw per-category scores for a post's content.

    Args:
        content: Post content (any case).
        lexicons: Category -> lexicon mapping.

    Returns:
        Dict of category -> raw score.
    """
    text = (content or "").lower()
    return {category: lexicon_score(text, lexicons[category]) for category in CATEGORIES}


def compute_lexicon_matches(
    content: str,
    lexicons: Lexicons = DEFAULT_LEXICONS,
) -> dict[str, tuple[str, ...]]:
    """Get matched keywords per category, for explaining a score."""
    text = (content or "").lower()
    return {category: match_keywords(text, lexicons[category]) for category in CATEGORIES}
