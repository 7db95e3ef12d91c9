"""Text processing utilities for keyword and content heuristics."""

import re
from collections import Counter

STOP_WORDS: frozenset[str] = frozenset({
    "the", "and", "for", "are", "but", "not", "you", "all", "can", "her",
    "was", "one", "our", "had", "have", "what", "were", "they", "how",
    "this", "that", "with", "from", "will", "would", "could", "should",
    "into", "than", "only", "other", "more", "very", "time", "just",
    "first", "over", "think", "also", "your", "work", "life", "way",
    "even", "back", "any", "good", "woman", "through", "world", "here",
    "where", "much", "go", "well", "long", "make", "may", "still",
})

_EDGE_PUNCT_RE = re.compile(r"^[^\w\s]|[^\w\s]$")


def count_words(text: str) -> int:
    """Count whitespace-separated words in text."""
    return len(text.split())


def word_set(text: str) -> set[str]:
    """Distinct lowercase words of a whitespace-separated phrase."""
    return {w for w in text.lower().split() if w}


def is_stop_word(word: str) -> bool:
    return word.lower() in STOP_WORDS


def is_punctuation(word: str) -> bool:
    """True when the token starts or ends with a punctuation character."""
    return bool(_EDGE_PUNCT_RE.search(word))


def jaccard_similarity(a: str, b: str) -> float:
    """Word-set Jaccard similarity of two phrases, in [0, 1]."""
    set_a, set_b = word_set(a), word_set(b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)


def calculate_readability(text: str) -> dict[str, float]:
    """Calculate readability scores for text.

    Returns:
        Dict with flesch_reading_ease, flesch_kincaid_grade, and
        automated_readability_index.
    """
    sentences = _split_sentences(text)
    words = text.split()
    syllable_count = sum(_count_syllables(w) for w in words)

    num_sentences = max(len(sentences), 1)
    num_words = max(len(words), 1)
    num_syllables = max(syllable_count, 1)

    fre = 206.835 - 1.015 * (num_words / num_sentences) - 84.6 * (num_syllables / num_words)
    fkgl = 0.39 * (num_words / num_sentences) + 11.8 * (num_syllables / num_words) - 15.59
    num_chars = sum(len(w) for w in words)
    ari = 4.71 * (num_chars / num_words) + 0.5 * (num_words / num_sentences) - 21.43

    return {
        "flesch_reading_ease": round(max(0.0, min(100.0, fre)), 1),
        "flesch_kincaid_grade": round(max(0.0, fkgl), 1),
        "automated_readability_index": round(max(0.0, ari), 1),
    }


def calculate_keyword_density(
    text: str, keyword: str
) -> dict[str, float | int]:
    """Calculate keyword density using whole-word matching.

    Density is ``matches / total_words * 100`` where a match is an
    occurrence of the full keyword bounded by non-word characters, so
    ``"foo"`` does not match inside ``"foobar"``.

    Args:
        text: The full text content.
        keyword: Single or multi-word keyword to measure.

    Returns:
        Dict with density_pct, count, and total_words.
    """
    keyword_clean = " ".join(keyword.lower().split())
    total_words = count_words(text)

    if total_words == 0 or not keyword_clean:
        return {"density_pct": 0.0, "count": 0, "total_words": total_words}

    parts = [re.escape(p) for p in keyword_clean.split()]
    pattern = re.compile(r"(?<!\w)" + r"\s+".join(parts) + r"(?!\w)")
    count = len(pattern.findall(text.lower()))

    density = count / total_words * 100
    return {
        "density_pct": round(density, 2),
        "count": count,
        "total_words": total_words,
    }


def contains_phrase(text: str, phrase: str) -> bool:
    """Whole-word, case-insensitive phrase containment."""
    return calculate_keyword_density(text, phrase)["count"] > 0


def top_terms(
    texts: list[str], min_length: int = 4, limit: int = 15
) -> list[str]:
    """Most frequent non-stop-word terms across texts."""
    counter: Counter[str] = Counter()
    for text in texts:
        for word in text.lower().split():
            if len(word) < min_length or is_stop_word(word) or is_punctuation(word):
                continue
            counter[word] += 1
    return [word for word, _ in counter.most_common(limit)]


# ------------------------------------------------------------------
# Private helpers
# ------------------------------------------------------------------

def _split_sentences(text: str) -> list[str]:
    """Split text into sentences using basic heuristics."""
    sentences = re.split(r'(?<=[.!?])\s+', text.strip())
    return [s for s in sentences if s.strip()]


def _count_syllables(word: str) -> int:
    """Estimate syllable count for an English word."""
    word = word.lower().strip(".,!?;:'\"-()*#")
    if not word:
        return 0
    if len(word) <= 3:
        return 1

    vowels = "aeiouy"
    count = 0
    prev_vowel = False
    for char in word:
        is_vowel = char in vowels
        if is_vowel and not prev_vowel:
            count += 1
        prev_vowel = is_vowel

    if word.endswith("e") and count > 1:
        count -= 1
    if word.endswith("le") and len(word) > 2 and word[-3] not in vowels:
        count += 1

    return max(1, count)
