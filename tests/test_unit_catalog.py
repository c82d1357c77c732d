"""Tests for the unit catalog loader."""
from staff_feedback.services.notifier import ERROR
from staff_feedback.services.unit_catalog import UnitCatalogLoader

STAFF_TABLE = "dados_professores"


def test_units_are_normalized_and_distinct(store, notifier, make_staff_row):
    store.tables[STAFF_TABLE].append(make_staff_row("Z. Extra", 8008, "North   Campus"))
    store.tables[STAFF_TABLE].append(make_staff_row("Z. Blank", 8009, "   "))
    store.tables[STAFF_TABLE].append(make_staff_row("Z. None", 8010, None))

    units = UnitCatalogLoader(store, STAFF_TABLE, notifier).load()

    assert sorted(units) == ["100 Rue School", "100% School", "Lakeside School", "North Campus", "South Campus"]
    assert len(units) == len(set(units))


def test_units_are_loaded_once(store, notifier):
    loader = UnitCatalogLoader(store, STAFF_TABLE, notifier)

    first = loader.load()
    second = loader.load()

    assert first == second
    assert store.calls == ["fetch_column"]


def test_failure_yields_empty_catalog_and_notification(store, notifier):
    store.fail_on.add("fetch_column")
    loader = UnitCatalogLoader(store, STAFF_TABLE, notifier)

    assert loader.load() == []
    assert [n.severity for n in notifier.drain()] == [ERROR]
    # no retry
    assert loader.load() == []
    assert store.calls == ["fetch_column"]
