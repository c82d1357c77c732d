"""Tests for the form session handlers."""


def test_units_come_from_catalog(form_session):
    assert "North Campus" in form_session.units()
    assert "Lakeside School" in form_session.units()


def test_change_unit_loads_roster(form_session):
    roster = form_session.change_unit("North Campus")

    assert [staff.registration_id for staff in roster] == ["1001", "1234"]
    assert form_session.state.roster == roster


def test_change_to_empty_unit_clears_roster(form_session, store):
    form_session.change_unit("North Campus")
    store.calls.clear()

    assert form_session.change_unit("") == []
    assert form_session.state.roster == []
    assert store.calls == []


def test_superseded_lookup_does_not_overwrite_roster(form_session, resolver):
    original_resolve = resolver.resolve

    def resolve_with_interleaving(unit):
        roster = original_resolve(unit)
        if unit == "North Campus":
            # a later selection completes while this lookup is still in flight
            form_session.change_unit("South Campus")
        return roster

    resolver.resolve = resolve_with_interleaving

    form_session.change_unit("North Campus")

    assert form_session.state.unit == "South Campus"
    assert [staff.name for staff in form_session.state.roster] == ["M. Souza"]


def test_select_staff_from_roster(form_session):
    form_session.change_unit("North Campus")

    staff = form_session.select_staff("1234")

    assert staff.name == "J. Doe"
    assert staff.display_label == "J. Doe - Teacher (1234)"
    assert form_session.select_staff("2002") is None
