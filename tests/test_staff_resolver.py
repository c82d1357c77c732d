"""Tests for unit to staff resolution."""
from staff_feedback.services.notifier import ERROR


def test_exact_match_returns_sorted_roster(resolver, store):
    roster = resolver.resolve("North Campus")

    assert [staff.name for staff in roster] == ["A. Silva", "J. Doe"]
    assert store.calls == ["select_eq"]


def test_exact_match_coerces_fields(resolver):
    roster = resolver.resolve("North Campus")
    doe = next(staff for staff in roster if staff.name == "J. Doe")

    assert doe.registration_id == "1234"
    assert doe.monthly_hours == "120"
    assert doe.tenure_months == "14"
    assert doe.weekly_hours == ""


def test_input_is_normalized_before_exact_match(resolver, store):
    roster = resolver.resolve("  North   Campus ")

    assert [staff.name for staff in roster] == ["A. Silva", "J. Doe"]
    assert store.calls == ["select_eq"]


def test_fallback_tolerates_case_and_whitespace(resolver, store):
    roster = resolver.resolve("lakeside school")

    assert [staff.name for staff in roster] == ["P. Lima"]
    assert store.calls == ["select_eq", "select_ilike"]


def test_fallback_matches_case_drift_like_exact(resolver):
    exact = resolver.resolve("North Campus")
    fallback = resolver.resolve("NORTH CAMPUS")

    assert fallback == exact


def test_fallback_treats_percent_literally(resolver, store):
    roster = resolver.resolve("100% school")

    assert [staff.name for staff in roster] == ["R. Costa"]
    assert store.calls == ["select_eq", "select_ilike"]


def test_fallback_treats_underscore_literally(store, resolver, make_staff_row):
    store.tables["dados_professores"].append(make_staff_row("U. One", 6006, "Unit_A"))
    store.tables["dados_professores"].append(make_staff_row("U. Two", 7007, "UnitXA"))

    roster = resolver.resolve("unit_a")

    assert [staff.name for staff in roster] == ["U. One"]


def test_unknown_unit_returns_empty_roster(resolver, notifier):
    assert resolver.resolve("Nowhere") == []
    assert notifier.drain() == []


def test_empty_unit_skips_store(resolver, store):
    assert resolver.resolve("   ") == []
    assert store.calls == []


def test_store_failure_notifies_and_returns_empty(resolver, store, notifier):
    store.fail_on.add("select_eq")

    assert resolver.resolve("North Campus") == []
    notifications = notifier.drain()
    assert len(notifications) == 1
    assert notifications[0].severity == ERROR


def test_fallback_failure_notifies_and_returns_empty(resolver, store, notifier):
    store.fail_on.add("select_ilike")

    assert resolver.resolve("north campus") == []
    assert [n.severity for n in notifier.drain()] == [ERROR]
