"""Rule-based auto-classification of issue reports into category and urgency.

Rules are plain substring tests on the normalized ``title + description``
text, evaluated in three tiers:

- Tier 0 (hazard override): the first matching hazard rule decides both
  category and urgency and short-circuits everything else.
- Tier 1 (category): categories are tried in ``CATEGORY_RULES`` order and
  the first match wins; no match yields ``other``.
- Tier 2 (urgency): start at ``medium``, escalate on generic or
  category-specific keywords, then downgrade on mitigating keywords. The
  downgrade runs last and therefore wins.
"""

from __future__ import annotations

from dataclasses import dataclass

from .config import DEFAULT_URGENCY_SCORE, URGENCY_SCORES
from .models import Classification
from .text import includes_any, normalize_text

RULE_BASED_REASON = "Rule-based classification"


@dataclass(frozen=True, slots=True)
class KeywordRule:
    tier: int
    keywords: tuple[str, ...]
    category: str | None = None
    urgency: str | None = None
    reason: str | None = None


HAZARD_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        tier=0,
        keywords=("short circuit", "spark", "sparks", "burning smell", "shock", "fire"),
        category="electricity",
        urgency="high",
        reason="Electrical hazard detected",
    ),
    KeywordRule(
        tier=0,
        keywords=("overflow", "flood", "flooding", "burst", "water everywhere"),
        category="water",
        urgency="high",
        reason="Flooding/overflow detected",
    ),
)

# Order is the tie-break: water > electricity > wifi > mess > maintenance
CATEGORY_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        tier=1,
        category="water",
        keywords=(
            "leak",
            "leakage",
            "pipe",
            "tap",
            "flush",
            "bathroom",
            "washroom",
            "water",
            "drain",
            "sewage",
            "no water",
        ),
    ),
    KeywordRule(
        tier=1,
        category="electricity",
        keywords=(
            "power cut",
            "electric",
            "electricity",
            "fan",
            "light",
            "bulb",
            "switch",
            "socket",
            "wire",
            "mcb",
        ),
    ),
    KeywordRule(
        tier=1,
        category="wifi",
        keywords=("wifi", "wi fi", "internet", "router", "network", "lan", "ping"),
    ),
    KeywordRule(
        tier=1,
        category="mess",
        keywords=(
            "mess",
            "food",
            "rotten",
            "stale",
            "oil",
            "uncooked",
            "hair",
            "insect",
            "taste",
            "smell",
            "dirty plate",
        ),
    ),
    KeywordRule(
        tier=1,
        category="maintenance",
        keywords=(
            "broken",
            "repair",
            "damage",
            "maintenance",
            "carpenter",
            "door",
            "lock",
            "hinge",
            "window",
            "table",
            "chair",
            "bed",
            "curtain",
            "rack",
        ),
    ),
)

# Applied in order; a rule with ``category=None`` applies to every category
URGENCY_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(tier=2, urgency="high", keywords=("urgent", "immediately", "asap", "danger", "hazard")),
    KeywordRule(tier=2, urgency="high", category="electricity", keywords=("power cut", "wire", "socket")),
    KeywordRule(tier=2, urgency="high", category="water", keywords=("leak", "no water")),
    KeywordRule(tier=2, urgency="high", category="wifi", keywords=("down", "no internet")),
    KeywordRule(tier=2, urgency="high", category="mess", keywords=("rotten", "stale", "insect", "hair")),
    KeywordRule(tier=2, urgency="low", keywords=("minor", "small", "slight", "whenever")),
)


def _match_category(text: str) -> str:
    for rule in CATEGORY_RULES:
        if includes_any(text, rule.keywords):
            return rule.category or "other"
    return "other"


def _match_urgency(text: str, category: str) -> str:
    urgency = "medium"
    for rule in URGENCY_RULES:
        if rule.category is not None and rule.category != category:
            continue
        if includes_any(text, rule.keywords):
            urgency = rule.urgency or urgency
    return urgency


def classify(title: str | None, description: str | None) -> Classification:
    """Classify a report into ``(category, urgency, reason)``.

    Parameters
    ----------
    title, description : str | None
        Author-supplied free text. Missing values are treated as empty.

    Returns
    -------
    Classification
        Hazard reports return immediately with the hazard reason; all other
        text yields ``reason="Rule-based classification"``.

    Examples
    --------
    >>> classify("Short circuit", "in the washroom").category
    'electricity'
    >>> classify("", "")
    Classification(category='other', urgency='medium', reason='Rule-based classification')
    """
    text = normalize_text(f"{title or ''} {description or ''}")

    for rule in HAZARD_RULES:
        if includes_any(text, rule.keywords):
            return Classification(
                category=rule.category or "other",
                urgency=rule.urgency or "high",
                reason=rule.reason or RULE_BASED_REASON,
            )

    category = _match_category(text)
    urgency = _match_urgency(text, category)
    return Classification(category=category, urgency=urgency, reason=RULE_BASED_REASON)


def urgency_to_score(urgency: str | None) -> int:
    """Map urgency to its ordering score (high=3, medium=2, anything else=1)."""
    if not urgency:
        return DEFAULT_URGENCY_SCORE
    return URGENCY_SCORES.get(str(urgency), DEFAULT_URGENCY_SCORE)
