"""
Spelling suggestions for unresolved names.

A weighted edit distance where case-only differences are nearly free, so
``console.Log`` suggests ``log`` ahead of any genuine misspelling.
"""

import math
from typing import Callable, Iterable, Optional, TypeVar

T = TypeVar("T")


def levenshtein_with_max(s1: str, s2: str, maximum: float) -> Optional[float]:
    """Weighted edit distance, or None once it exceeds ``maximum``.

    Insertions and deletions cost 1, substitutions 2, and substituting a
    character by a different case of itself 0.1.
    """
    previous = [float(i) for i in range(len(s2) + 1)]
    current = [0.0] * (len(s2) + 1)
    big = maximum + 0.01

    for i in range(1, len(s1) + 1):
        c1 = s1[i - 1]
        min_j = math.ceil(i - maximum) if i > maximum else 1
        max_j = math.floor(maximum + i) if len(s2) > maximum + i else len(s2)
        current[0] = float(i)
        col_min = float(i)
        for j in range(1, min_j):
            current[j] = big
        for j in range(min_j, max_j + 1):
            c2 = s2[j - 1]
            if c1.lower() == c2.lower():
                substitution = previous[j - 1] + 0.1
            else:
                substitution = previous[j - 1] + 2
            if c1 == c2:
                distance = previous[j - 1]
            else:
                distance = min(previous[j] + 1, current[j - 1] + 1, substitution)
            current[j] = distance
            col_min = min(col_min, distance)
        for j in range(max_j + 1, len(s2) + 1):
            current[j] = big
        if col_min > maximum:
            return None
        previous, current = current, previous

    result = previous[len(s2)]
    return None if result > maximum else result


def get_spelling_suggestion(name: str, candidates: Iterable[T],
                            get_name: Callable[[T], Optional[str]] = lambda c: c) -> Optional[T]:
    """Best candidate close enough to ``name`` to be a plausible typo.

    Candidates whose length differs by more than ``min(2, floor(len * 0.34))``
    are ignored, as are candidates shorter than three characters unless they
    differ from ``name`` only by case.
    """
    maximum_length_difference = min(2, math.floor(len(name) * 0.34))
    best_distance = math.floor(len(name) * 0.4) + 1
    best_candidate = None
    for candidate in candidates:
        candidate_name = get_name(candidate)
        if candidate_name is None or abs(len(candidate_name) - len(name)) > maximum_length_difference:
            continue
        if candidate_name == name:
            continue
        if len(candidate_name) < 3 and candidate_name.lower() != name.lower():
            continue
        distance = levenshtein_with_max(name, candidate_name, best_distance - 0.1)
        if distance is None:
            continue
        best_distance = distance
        best_candidate = candidate
    return best_candidate
