"""Name similarity scoring for participant matches."""

from rapidfuzz.distance import Levenshtein

# Two names are considered the same person above this similarity (0–1 scale)
SIMILARITY_THRESHOLD = 0.85


def similarity(a: str, b: str) -> float:
    """Calculate the edit-distance similarity of two normalized strings.

    Defined as ``1 - distance / max(len(a), len(b))`` with unit costs for
    insertions, deletions and substitutions. Two empty strings are
    identical.

    Args:
        a: First normalized string.
        b: Second normalized string.

    Returns:
        Similarity between 0.0 and 1.0.
    """
    if not a and not b:
        return 1.0
    distance = Levenshtein.distance(a, b)
    return 1.0 - distance / max(len(a), len(b), 1)


def names_match(
    first_a: str,
    last_a: str,
    first_b: str,
    last_b: str,
    threshold: float = SIMILARITY_THRESHOLD,
) -> tuple[float, float, bool]:
    """Compare two normalized first/last name pairs.

    Args:
        first_a: Normalized first name of the registrant.
        last_a: Normalized last name of the registrant.
        first_b: Normalized first name of the stored participant.
        last_b: Normalized last name of the stored participant.
        threshold: Both similarities must be strictly above this value.

    Returns:
        (first name similarity, last name similarity, whether both pass).
    """
    fn_sim = similarity(first_a, first_b)
    ln_sim = similarity(last_a, last_b)
    return fn_sim, ln_sim, fn_sim > threshold and ln_sim > threshold
