"""Tests for the spreadsheet mirror sinks."""
import logging
from unittest.mock import MagicMock

import openpyxl
import pytest
import requests

from staff_feedback.config.config_manager import ConfigManager
from staff_feedback.config.settings import mirror_columns
from staff_feedback.services.mirror_sink import (
    BackgroundMirror,
    ExcelMirrorSink,
    MirrorSinkError,
    WebhookMirrorSink,
    create_mirror_sink,
)
from staff_feedback.utils.logging_config import ErrorHandler


def test_excel_sink_writes_header_once_and_appends(tmp_path):
    path = tmp_path / "reports" / "mirror.xlsx"
    sink = ExcelMirrorSink(str(path))

    sink.append({"user_id": "u1", "user_name": "First", "unidade": "North Campus", "postura_prof": 3})
    sink.append({"user_id": "u2", "user_name": "Second", "unidade": "South Campus", "postura_prof": 5})

    workbook = openpyxl.load_workbook(path)
    sheet = workbook[ExcelMirrorSink.SHEET_NAME]
    rows = list(sheet.iter_rows(values_only=True))
    columns = mirror_columns()

    assert list(rows[0]) == columns
    assert len(rows) == 3
    assert rows[1][columns.index("user_id")] == "u1"
    assert rows[2][columns.index("unidade")] == "South Campus"
    assert rows[2][columns.index("postura_prof")] == 5
    assert sheet.freeze_panes == "A2"


def test_excel_sink_wraps_unreadable_workbook(tmp_path):
    path = tmp_path / "broken.xlsx"
    path.write_text("not a workbook")

    with pytest.raises(MirrorSinkError):
        ExcelMirrorSink(str(path)).append({"user_id": "u1"})


def test_webhook_sink_posts_json():
    session = MagicMock()
    session.post.return_value = MagicMock(status_code=200, text="ok")
    sink = WebhookMirrorSink("https://hooks.example/sheet", timeout=5, session=session)

    sink.append({"user_id": "u1"})

    session.post.assert_called_once_with("https://hooks.example/sheet", json={"user_id": "u1"}, timeout=5)


def test_webhook_sink_raises_on_rejection():
    session = MagicMock()
    session.post.return_value = MagicMock(status_code=500, text="boom")

    with pytest.raises(MirrorSinkError):
        WebhookMirrorSink("https://hooks.example/sheet", session=session).append({})


def test_webhook_sink_raises_on_network_error():
    session = MagicMock()
    session.post.side_effect = requests.exceptions.Timeout("slow")

    with pytest.raises(MirrorSinkError):
        WebhookMirrorSink("https://hooks.example/sheet", session=session).append({})


def test_create_mirror_sink_follows_backend(env_config, monkeypatch):
    assert create_mirror_sink(ConfigManager()) is None

    monkeypatch.setenv("MIRROR_BACKEND", "excel")
    assert isinstance(create_mirror_sink(ConfigManager()), ExcelMirrorSink)

    monkeypatch.setenv("MIRROR_BACKEND", "webhook")
    monkeypatch.setenv("MIRROR_WEBHOOK_URL", "https://hooks.example/sheet")
    assert isinstance(create_mirror_sink(ConfigManager()), WebhookMirrorSink)


class _FlakySink:
    def __init__(self):
        self.rows = []

    def append(self, row):
        if row.get("user_id") == "bad":
            raise MirrorSinkError("sheet locked")
        self.rows.append(row)


def test_background_mirror_keeps_order_and_isolates_failures():
    sink = _FlakySink()
    handler = ErrorHandler(logging.getLogger("background-mirror-test"))
    background = BackgroundMirror(sink, handler)

    futures = [background.submit({"user_id": user_id}, user_id) for user_id in ("u1", "bad", "u2")]
    background.shutdown(wait=True)

    assert [future.result() for future in futures] == [True, False, True]
    assert [row["user_id"] for row in sink.rows] == ["u1", "u2"]
    assert handler.error_counts == {"mirror": 1}
