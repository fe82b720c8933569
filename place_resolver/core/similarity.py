"""Character-set Jaccard similarity used to rank name-match candidates."""

from typing import Optional, Sequence, Tuple

from place_resolver.models import PlaceCandidate


def _char_set(text: str) -> frozenset:
    return frozenset((text or "").lower())


def similarity(left: str, right: str) -> float:
    """|A ∩ B| / |A ∪ B| over distinct characters; 0.0 when either side is empty."""
    a, b = _char_set(left), _char_set(right)
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def rank_candidates(name: str, candidates: Sequence[PlaceCandidate]) -> list:
    """Candidates with their scores, best first; ties keep the service's order."""
    scored = [(candidate, similarity(name, candidate.name)) for candidate in candidates]
    return sorted(scored, key=lambda item: item[1], reverse=True)


def best_match(
    name: str,
    candidates: Sequence[PlaceCandidate],
    threshold: float = 0.0,
) -> Optional[Tuple[PlaceCandidate, float]]:
    ranked = rank_candidates(name, candidates)
    if not ranked or ranked[0][1] < threshold:
        return None
    return ranked[0]
