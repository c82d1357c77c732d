"""Tests for unit name normalization and LIKE escaping."""
from staff_feedback.utils.text import build_unit_pattern, contains_unit_name, escape_like, normalize_unit_name


def test_normalize_unit_name():
    assert normalize_unit_name("North Campus") == "North Campus"
    assert normalize_unit_name("  North \t Campus  ") == "North Campus"
    assert normalize_unit_name("North\nCampus") == "North Campus"
    assert normalize_unit_name("") == ""
    assert normalize_unit_name("   ") == ""
    assert normalize_unit_name(None) == ""


def test_escape_like():
    assert escape_like("100% School") == "100\\% School"
    assert escape_like("Unit_A") == "Unit\\_A"
    assert escape_like("C:\\Schools") == "C:\\\\Schools"
    assert escape_like("Plain") == "Plain"


def test_build_unit_pattern():
    assert build_unit_pattern("North Campus") == "%North%Campus%"
    assert build_unit_pattern("  100%   School ") == "%100\\%%School%"


def test_contains_unit_name():
    assert contains_unit_name("  NORTH   campus ", "North Campus")
    assert contains_unit_name("Escola North Campus Annex", "north campus")
    assert not contains_unit_name("North West Campus", "North Campus")
    assert not contains_unit_name(None, "North Campus")
