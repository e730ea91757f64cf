"""Near-duplicate detection for newly submitted issues.

Two independent signals live here:

- ``find_duplicate``: lexical similarity against a short trailing window of
  issues in the same category and location. Advisory only, it never merges
  and never blocks a submission.
- ``duplicate_group_id``: a coarse fingerprint stored for offline grouping.
  It is not consulted by the similarity check.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from .config import (
    DUPLICATE_CANDIDATE_LIMIT,
    DUPLICATE_THRESHOLD,
    DUPLICATE_WINDOW_HOURS,
    ELECTRICITY_SYNONYMS,
    FINGERPRINT_MIN_WORD_LENGTH,
    FINGERPRINT_WORD_COUNT,
    MERGED_STATUS,
)
from .mappers import map_issue
from .models import IssueModel
from .store import Query
from .text import normalize_text, word_set
from .timestamps import utc_now

logger = logging.getLogger(__name__)

# Longest phrases first so "short circuit" is replaced before "shock" etc.
_ELECTRICITY_PATTERN = re.compile(
    r"\b("
    + "|".join(re.escape(p) for p in sorted(ELECTRICITY_SYNONYMS, key=len, reverse=True))
    + r")\b"
)


@dataclass(slots=True, frozen=True)
class DuplicateCandidate:
    category: str
    location: str
    title: str
    description: str = ""


def canonicalize(text: str | None, category: str | None) -> str:
    """Normalize text and, for electricity, fold hazard synonyms into ``spark``."""
    normalized = normalize_text(text)
    if category != "electricity" or not normalized:
        return normalized
    return _ELECTRICITY_PATTERN.sub(lambda m: ELECTRICITY_SYNONYMS[m.group(1)], normalized)


def similarity(a: str, b: str) -> float:
    """Shared-word score ``|A & B| / max(|A|, |B|, 1)`` over normalized word sets."""
    words_a = word_set(a)
    words_b = word_set(b)
    denominator = max(len(words_a), len(words_b), 1)
    return len(words_a & words_b) / denominator


def _comparison_text(title: str | None, description: str | None, category: str | None) -> str:
    return canonicalize(f"{title or ''} {description or ''}", category)


def select_candidates(
    candidate: DuplicateCandidate,
    recent_issues: Iterable[IssueModel],
    *,
    now: datetime | None = None,
) -> list[IssueModel]:
    """Restrict to same category and location within the trailing window.

    Merged issues are skipped. Results are most-recent-first and capped at
    ``DUPLICATE_CANDIDATE_LIMIT``.
    """
    now = now or utc_now()
    since = now - timedelta(hours=DUPLICATE_WINDOW_HOURS)
    pool = [
        issue
        for issue in recent_issues
        if issue.category == candidate.category
        and issue.location == candidate.location
        and issue.status != MERGED_STATUS
        and issue.created_at is not None
        and issue.created_at >= since
    ]
    pool.sort(key=lambda issue: issue.created_at, reverse=True)
    return pool[:DUPLICATE_CANDIDATE_LIMIT]


def find_duplicate(
    candidate: DuplicateCandidate,
    recent_issues: Iterable[IssueModel],
    *,
    now: datetime | None = None,
    threshold: float = DUPLICATE_THRESHOLD,
) -> str | None:
    """Return the id of the best-scoring recent issue at or above ``threshold``.

    Any failure while scoring is logged and reported as "no duplicate".
    """
    try:
        target = _comparison_text(candidate.title, candidate.description, candidate.category)
        best_id: str | None = None
        best_score = 0.0
        for issue in select_candidates(candidate, recent_issues, now=now):
            score = similarity(target, _comparison_text(issue.title, issue.description, issue.category))
            if score > best_score:
                best_score = score
                best_id = issue.id
        if best_id is not None and best_score >= threshold:
            logger.debug("Possible duplicate %s (score %.2f)", best_id, best_score)
            return best_id
        return None
    except Exception as exc:
        logger.warning("Duplicate scoring failed, treating as unique: %s", exc)
        return None


def duplicate_group_id(category: str | None, location: str | None, title: str | None, description: str | None) -> str:
    """Fingerprint ``category|location|first six words of 4+ letters``.

    Examples
    --------
    >>> duplicate_group_id("water", "Hostel A", "Tap leaking", "bathroom tap on floor two")
    'water|hostel a|leaking bathroom floor'
    """
    words = normalize_text(f"{title or ''} {description or ''}").split()
    significant = [w for w in words if len(w) >= FINGERPRINT_MIN_WORD_LENGTH][:FINGERPRINT_WORD_COUNT]
    return f"{category or 'other'}|{normalize_text(location)}|{' '.join(significant)}"


class DuplicateDetector:
    """Store-backed lookup used by the submission flow.

    The store query and the scoring both run under one guard: a missing
    index, a network failure or a malformed document all resolve to None.
    """

    def __init__(self, store):
        self.store = store

    def lookup(self, candidate: DuplicateCandidate, *, now: datetime | None = None) -> str | None:
        now = now or utc_now()
        query = (
            Query()
            .where("category", "==", candidate.category)
            .where("location", "==", candidate.location)
            .where("createdAt", ">=", now - timedelta(hours=DUPLICATE_WINDOW_HOURS))
            .ordered("createdAt", descending=True)
            .limited(DUPLICATE_CANDIDATE_LIMIT)
        )
        try:
            recent = [map_issue(doc) for doc in self.store.query(query)]
        except Exception as exc:
            logger.warning("Duplicate lookup failed, continuing without it: %s", exc)
            return None
        return find_duplicate(candidate, recent, now=now)
