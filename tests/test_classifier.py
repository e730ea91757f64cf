from campus_app.core.classifier import (
    CATEGORY_RULES,
    HAZARD_RULES,
    RULE_BASED_REASON,
    URGENCY_RULES,
    classify,
    urgency_to_score,
)
from campus_app.core.text import normalize_text, word_set


def test_normalize_text():
    assert normalize_text("  Short-circuit!! in Room #12 ") == "short circuit in room 12"
    assert normalize_text("Wi-Fi\tdown\n\nagain") == "wi fi down again"
    assert normalize_text("") == ""
    assert normalize_text(None) == ""


def test_word_set():
    assert word_set("Tap, tap... LEAKING") == {"tap", "leaking"}
    assert word_set("") == set()


def test_empty_text_defaults():
    result = classify("", "")
    assert result.category == "other"
    assert result.urgency == "medium"
    assert result.reason == RULE_BASED_REASON
    assert classify(None, None) == result


def test_classify_is_deterministic():
    first = classify("Tap leaking", "Second floor bathroom")
    second = classify("Tap leaking", "Second floor bathroom")
    assert first == second


def test_short_circuit_overrides_other_categories():
    result = classify("Short circuit", "water dripping from the tap onto the router")
    assert result.category == "electricity"
    assert result.urgency == "high"
    assert result.reason == "Electrical hazard detected"


def test_short_circuit_even_with_minor():
    result = classify("minor short circuit", "")
    assert (result.category, result.urgency) == ("electricity", "high")


def test_flood_override():
    result = classify("Corridor flooding", "")
    assert result.category == "water"
    assert result.urgency == "high"
    assert result.reason == "Flooding/overflow detected"


def test_category_priority_water_before_electricity():
    result = classify("Water on the floor", "next to the electric heater")
    assert result.category == "water"


def test_categories():
    assert classify("Router not responding", "").category == "wifi"
    assert classify("Wi-Fi is slow", "").category == "wifi"
    assert classify("Food was undercooked", "rice was uncooked").category == "mess"
    assert classify("Cupboard door broken", "").category == "maintenance"
    assert classify("Lost my id card", "").category == "other"


def test_category_specific_escalation():
    assert classify("Pipe leak", "").urgency == "high"
    assert classify("Exposed wire near desk", "").urgency == "high"
    assert classify("Internet down", "in block B").urgency == "high"
    assert classify("Rotten vegetables in curry", "").urgency == "high"


def test_generic_escalation():
    assert classify("Door lock jammed", "please fix asap").urgency == "high"


def test_mitigating_keyword_wins_over_escalation():
    assert classify("Urgent pipe leak", "").urgency == "high"
    result = classify("Urgent pipe leak", "only a minor drip")
    assert result.category == "water"
    assert result.urgency == "low"


def test_default_medium():
    assert classify("Router blinking", "no idea why").urgency == "medium"


def test_rule_table_shape():
    assert [r.category for r in CATEGORY_RULES] == ["water", "electricity", "wifi", "mess", "maintenance"]
    assert {r.tier for r in HAZARD_RULES} == {0}
    assert URGENCY_RULES[-1].urgency == "low"
    for rule in (*HAZARD_RULES, *CATEGORY_RULES, *URGENCY_RULES):
        for kw in rule.keywords:
            assert normalize_text(kw) == kw


def test_urgency_to_score():
    assert urgency_to_score("high") == 3
    assert urgency_to_score("medium") == 2
    assert urgency_to_score("low") == 1
    assert urgency_to_score("critical") == 1
    assert urgency_to_score(None) == 1
