"""Pytest configuration and fixtures."""
import re

import pytest

from staff_feedback.config.settings import CRITERIA, STAFF_COLUMNS
from staff_feedback.services.form_session import FormSession
from staff_feedback.services.notifier import CollectingNotifier
from staff_feedback.services.staff_resolver import StaffResolver
from staff_feedback.services.store_client import StoreAPIError
from staff_feedback.services.submission import SubmissionPipeline
from staff_feedback.services.unit_catalog import UnitCatalogLoader

STAFF_TABLE = "dados_professores"
FEEDBACK_TABLE = "feedback_professores"


def like_to_regex(pattern, case_insensitive=False):
    """Translate a SQL LIKE pattern (with backslash escapes) to a compiled regex."""
    parts = []
    chars = iter(pattern)
    for char in chars:
        if char == "\\":
            parts.append(re.escape(next(chars, "\\")))
        elif char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    flags = re.IGNORECASE | re.DOTALL if case_insensitive else re.DOTALL
    return re.compile("".join(parts), flags)


class FakeStore:
    """In-memory stand-in for the Supabase store client."""

    def __init__(self, staff_rows=None):
        self.tables = {STAFF_TABLE: list(staff_rows or []), FEEDBACK_TABLE: []}
        self.calls = []
        self.fail_on = set()

    def _check(self, operation):
        self.calls.append(operation)
        if operation in self.fail_on:
            raise StoreAPIError(f"{operation} failed", status_code=503)

    def fetch_column(self, table, column):
        self._check("fetch_column")
        values = [row.get(column) for row in self.tables[table] if row.get(column) is not None]
        return sorted(values)

    def select_eq(self, table, select, column, value, order_by):
        self._check("select_eq")
        rows = [row for row in self.tables[table] if row.get(column) == value]
        return sorted(rows, key=lambda row: row.get(order_by) or "")

    def select_ilike(self, table, select, column, pattern, order_by):
        self._check("select_ilike")
        regex = like_to_regex(pattern, case_insensitive=True)
        rows = [
            row for row in self.tables[table]
            if row.get(column) is not None and regex.fullmatch(row.get(column))
        ]
        return sorted(rows, key=lambda row: row.get(order_by) or "")

    def insert(self, table, rows):
        self._check("insert")
        self.tables[table].extend(dict(row) for row in rows)

    @property
    def feedback_rows(self):
        return self.tables[FEEDBACK_TABLE]


class RecordingMirror:
    """Mirror sink keeping appended rows in memory."""

    def __init__(self, fail=False):
        self.rows = []
        self.fail = fail

    def append(self, row):
        if self.fail:
            raise RuntimeError("spreadsheet unavailable")
        self.rows.append(dict(row))


def staff_row(name, registration_id, unit, **extra):
    """Build a staff table row using the store's column names."""
    row = {column: None for column in STAFF_COLUMNS.values()}
    row.update({
        "Nome": name,
        "Cadastro": registration_id,
        "ESCOLA": unit,
        "Cargo": "Teacher",
        "REGIONAL": "North",
    })
    row.update(extra)
    return row


@pytest.fixture
def staff_rows():
    return [
        staff_row("J. Doe", 1234, "North Campus", Horas_Mes=120.0, tempo_casa_mes=14),
        staff_row("A. Silva", 1001, "North Campus", **{"Admissão": "2023-02-01"}),
        staff_row("M. Souza", 2002, "South Campus"),
        staff_row("P. Lima", 3003, "  Lakeside   School "),
        staff_row("R. Costa", 4004, "100% School"),
        staff_row("T. Alves", 5005, "100 Rue School"),
    ]


@pytest.fixture
def store(staff_rows):
    return FakeStore(staff_rows)


@pytest.fixture
def notifier():
    return CollectingNotifier()


@pytest.fixture
def mirror():
    return RecordingMirror()


@pytest.fixture
def resolver(store, notifier):
    return StaffResolver(store, STAFF_TABLE, notifier)


@pytest.fixture
def pipeline(store, notifier, mirror):
    return SubmissionPipeline(store, FEEDBACK_TABLE, notifier, mirror=mirror)


@pytest.fixture
def form_session(store, notifier, resolver, pipeline):
    return FormSession(
        catalog=UnitCatalogLoader(store, STAFF_TABLE, notifier),
        resolver=resolver,
        pipeline=pipeline,
        notifier=notifier,
    )


@pytest.fixture
def rate_all():
    """Set every criterion of a form session to the same rating."""
    def _rate_all(session, rating=3):
        for criterion in CRITERIA:
            session.set_answer(criterion.key, rating)
    return _rate_all


@pytest.fixture
def env_config(monkeypatch, tmp_path):
    """Minimal environment for ConfigManager."""
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co/")
    monkeypatch.setenv("SUPABASE_KEY", "test-key-1234567890")
    monkeypatch.setenv("MIRROR_BACKEND", "none")
    monkeypatch.setenv("MIRROR_WORKBOOK", str(tmp_path / "mirror.xlsx"))
    monkeypatch.setenv("FLASK_SECRET_KEY", "test-secret")
    for name in ("REQUIRE_AUTH", "LOGIN_URL", "MIRROR_WEBHOOK_URL", "REQUEST_TIMEOUT", "MIRROR_TIMEOUT",
                 "STAFF_TABLE", "FEEDBACK_TABLE", "ANONYMOUS_USER_ID", "ANONYMOUS_USER_NAME",
                 "FORM_SESSION_LIMIT", "FORM_SESSION_TTL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_staff_row():
    return staff_row


@pytest.fixture
def failing_mirror():
    return RecordingMirror(fail=True)
