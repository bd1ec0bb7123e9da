"""Language-quota allocation with duplicate suppression.

Selection walks each cohort in descending score order and accepts up to its
quota, skipping duplicates of anything already accepted. Whatever capacity
is left is then backfilled from a single pool of every unaccepted candidate
from both cohorts, again by descending score. Quotas are a preference only:
a short cohort just leaves more room for the other one.
"""

import logging

from topicfeed.data import ScoredCandidate
from topicfeed.dedup import DuplicateDetector

logger = logging.getLogger(__name__)


def _by_score(candidates: list[ScoredCandidate]) -> list[ScoredCandidate]:
    # Stable: ties keep first-seen order.
    return sorted(candidates, key=lambda c: c.score, reverse=True)


class QuotaAllocator:
    """Select a bounded, language-balanced, duplicate-free set of candidates.

    Args:
        capacity: Maximum number of articles selected (N).
        primary_quota: Preferred number of primary-language articles.
        secondary_quota: Preferred number of secondary-language articles.
        detector: Duplicate detector used against the accepted set.
    """

    def __init__(
        self,
        capacity: int = 5,
        primary_quota: int = 3,
        secondary_quota: int = 2,
        *,
        detector: DuplicateDetector | None = None,
    ) -> None:
        self._capacity = max(0, capacity)
        self._primary_quota = max(0, primary_quota)
        self._secondary_quota = max(0, secondary_quota)
        self._detector = detector or DuplicateDetector()

    @property
    def capacity(self) -> int:
        return self._capacity

    def allocate(
        self,
        primary: list[ScoredCandidate],
        secondary: list[ScoredCandidate],
        *,
        capacity: int | None = None,
    ) -> list[ScoredCandidate]:
        """Pick up to ``capacity`` candidates from the two cohorts.

        Args:
            primary: Scored primary-language candidates.
            secondary: Scored secondary-language candidates.
            capacity: Per-call override of the configured capacity.

        Returns:
            Accepted candidates in acceptance order: primary quota picks,
            secondary quota picks, then backfill.
        """
        limit = self._capacity if capacity is None else max(0, capacity)
        primary = _by_score(primary)
        secondary = _by_score(secondary)

        accepted: list[ScoredCandidate] = []
        taken: set[int] = set()

        def take(cohort: list[ScoredCandidate], quota: int) -> None:
            count = 0
            for candidate in cohort:
                if count >= quota or len(accepted) >= limit:
                    break
                if self._is_duplicate(candidate, accepted):
                    continue
                accepted.append(candidate)
                taken.add(id(candidate))
                count += 1

        take(primary, self._primary_quota)
        take(secondary, self._secondary_quota)

        pool = _by_score([c for c in primary + secondary if id(c) not in taken])
        for candidate in pool:
            if len(accepted) >= limit:
                break
            if self._is_duplicate(candidate, accepted):
                continue
            accepted.append(candidate)

        logger.debug(
            "Allocated %d/%d (primary pool %d, secondary pool %d)",
            len(accepted),
            limit,
            len(primary),
            len(secondary),
        )
        return accepted[:limit]

    def _is_duplicate(self, candidate: ScoredCandidate, accepted: list[ScoredCandidate]) -> bool:
        return self._detector.duplicates_any(candidate.article, [a.article for a in accepted])
