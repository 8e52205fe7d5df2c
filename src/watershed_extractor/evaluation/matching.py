"""Fuzzy text matching used to pair extracted records with ground truth.

Substring containment is checked first, then the share of words in the
first text that also occur in the second, relative to the longer word
sequence. Short label-like fields (BMP names) can require an
exact normalized match instead.
"""

from typing import Any

DEFAULT_THRESHOLD = 0.7


def normalize_text(value: Any) -> str:
    """Lowercase and trim a text value. None becomes the empty string."""
    if value is None:
        return ""
    return str(value).lower().strip()


def word_overlap(text1: Any, text2: Any) -> float:
    """Share of words in text1 that appear anywhere in text2.

    The count is divided by the length of the longer of the two word
    sequences, so the measure is asymmetric in its numerator only.

    Returns:
        Overlap ratio between 0.0 and 1.0 (0.0 if either text is empty).
    """
    words1 = normalize_text(text1).split()
    words2 = normalize_text(text2).split()
    if not words1 or not words2:
        return 0.0

    vocabulary = set(words2)
    common = sum(1 for word in words1 if word in vocabulary)
    return common / max(len(words1), len(words2))


def fuzzy_match(
    text1: Any,
    text2: Any,
    threshold: float = DEFAULT_THRESHOLD,
    require_exact: bool = False,
) -> bool:
    """Decide whether two free-text fields denote the same item.

    Args:
        text1: Text of the record being classified (usually the extracted one).
        text2: Text to compare against.
        threshold: Minimum word overlap ratio for a match.
        require_exact: Only accept identical normalized strings.

    Returns:
        True if the texts match. Empty or absent input never matches.

    Example:
        ```python
        fuzzy_match("Cover Crops", "cover crops")  # True
        fuzzy_match("Cover Crop", "Cover Crops", require_exact=True)  # False
        ```
    """
    clean1 = normalize_text(text1)
    clean2 = normalize_text(text2)
    if not clean1 or not clean2:
        return False

    if require_exact:
        return clean1 == clean2

    if clean1 in clean2 or clean2 in clean1:
        return True

    return word_overlap(clean1, clean2) >= threshold
