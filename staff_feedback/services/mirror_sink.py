"""
Spreadsheet mirror sinks for submitted feedback.
The mirror is a reporting copy; the primary store remains the system of record.
"""
import logging
import threading
import zipfile
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional

import openpyxl
import requests
from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.datavalidation import DataValidation
from openpyxl.worksheet.worksheet import Worksheet

from ..config.config_manager import ConfigManager
from ..config.settings import CRITERIA, RATING_MAX, RATING_MIN, mirror_columns
from ..utils.logging_config import ErrorHandler


class MirrorSinkError(Exception):
    """Exception raised when a row cannot be appended to the mirror."""
    pass


class MirrorSink:
    """Append-only sink receiving flattened feedback rows."""

    def append(self, row: Dict[str, Any]) -> None:
        raise NotImplementedError


class ExcelMirrorSink(MirrorSink):
    """
    Appends feedback rows to a local Excel workbook.

    The workbook holds a single "Feedback" sheet whose first row is the
    header; it is created on first use and saved after every append.
    """

    SHEET_NAME = "Feedback"

    def __init__(self, file_path: str, columns: Optional[List[str]] = None):
        """
        Initialize Excel sink with target file path.

        Args:
            file_path (str): Path to Excel file to create or extend
            columns: Column order; defaults to the mirror column layout
        """
        self.file_path = Path(file_path)
        self.columns = columns or mirror_columns()
        self.logger = logging.getLogger(__name__)
        self._lock = threading.Lock()

    def append(self, row: Dict[str, Any]) -> None:
        """
        Add a row to the Feedback sheet and save the workbook.

        Args:
            row: Column name -> value; unknown columns are ignored

        Raises:
            MirrorSinkError: If the workbook cannot be read or written
        """
        with self._lock:
            try:
                workbook, sheet = self._create_or_load_workbook()
                next_row = sheet.max_row + 1
                for col_idx, column in enumerate(self.columns, 1):
                    sheet.cell(row=next_row, column=col_idx, value=row.get(column, ''))
                self._format_rating_cells(sheet, next_row)
                workbook.save(self.file_path)
                workbook.close()
            except (OSError, ValueError, KeyError, zipfile.BadZipFile, InvalidFileException) as e:
                raise MirrorSinkError(f"Could not append to {self.file_path}: {e}") from e

        self.logger.info(f"Mirrored feedback row to {self.file_path} (row {next_row})")

    def _create_or_load_workbook(self) -> tuple:
        """
        Load the workbook, or create it with a formatted header row.

        Returns:
            tuple: (Workbook, Worksheet)
        """
        if self.file_path.exists():
            workbook = openpyxl.load_workbook(self.file_path)
            if self.SHEET_NAME in workbook.sheetnames:
                return workbook, workbook[self.SHEET_NAME]
            sheet = workbook.create_sheet(self.SHEET_NAME)
        else:
            workbook = Workbook()
            sheet = workbook.active
            sheet.title = self.SHEET_NAME
            self.file_path.parent.mkdir(parents=True, exist_ok=True)

        self._setup_headers(sheet)
        return workbook, sheet

    def _setup_headers(self, sheet: Worksheet) -> None:
        """Write and style the header row, then freeze it."""
        for col_idx, header in enumerate(self.columns, 1):
            cell = sheet.cell(row=1, column=col_idx, value=header)
            cell.font = Font(bold=True)
            cell.alignment = Alignment(horizontal='center')
            cell.fill = PatternFill(start_color="CCCCCC", end_color="CCCCCC", fill_type="solid")
            sheet.column_dimensions[get_column_letter(col_idx)].width = max(12, len(header) + 2)

        rating_validation = DataValidation(
            type="whole",
            operator="between",
            formula1=RATING_MIN,
            formula2=RATING_MAX,
            showErrorMessage=True,
            errorTitle="Invalid Rating",
            error=f"Rating must be an integer between {RATING_MIN} and {RATING_MAX}"
        )
        for col_idx in self._rating_column_indexes():
            col_letter = get_column_letter(col_idx)
            rating_validation.add(f"{col_letter}2:{col_letter}1000")
        sheet.add_data_validation(rating_validation)

        sheet.freeze_panes = "A2"

    def _rating_column_indexes(self) -> List[int]:
        rating_columns = {criterion.column for criterion in CRITERIA}
        return [idx for idx, column in enumerate(self.columns, 1) if column in rating_columns]

    def _format_rating_cells(self, sheet: Worksheet, row: int) -> None:
        for col_idx in self._rating_column_indexes():
            sheet.cell(row=row, column=col_idx).alignment = Alignment(horizontal='center')


class WebhookMirrorSink(MirrorSink):
    """
    Posts feedback rows as JSON to a spreadsheet webhook, such as a
    Google Apps Script web app bound to a sheet.
    """

    def __init__(self, url: str, timeout: float = 10, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logging.getLogger(__name__)

    def append(self, row: Dict[str, Any]) -> None:
        """
        Send one row to the webhook.

        Raises:
            MirrorSinkError: If the request fails or is rejected
        """
        try:
            response = self.session.post(self.url, json=row, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise MirrorSinkError(f"Spreadsheet webhook request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise MirrorSinkError(
                f"Spreadsheet webhook returned HTTP {response.status_code}: {response.text[:200]}"
            )
        self.logger.info("Mirrored feedback row to spreadsheet webhook")


def create_mirror_sink(config_manager: ConfigManager) -> Optional[MirrorSink]:
    """
    Build the mirror sink selected by MIRROR_BACKEND.

    Returns:
        MirrorSink or None when mirroring is disabled
    """
    backend = config_manager.get_mirror_backend()
    if backend == 'excel':
        return ExcelMirrorSink(config_manager.get_mirror_workbook())
    if backend == 'webhook':
        return WebhookMirrorSink(
            config_manager.get_mirror_webhook_url(),
            timeout=config_manager.get_mirror_timeout()
        )
    return None


class BackgroundMirror:
    """
    Appends rows to a mirror sink on a worker thread.

    A single worker keeps rows in submission order. Failures are passed to
    the error handler and never reach the caller.
    """

    def __init__(self, sink: MirrorSink, error_handler: Optional[ErrorHandler] = None, max_workers: int = 1):
        self.sink = sink
        self.logger = logging.getLogger(__name__)
        self.error_handler = error_handler or ErrorHandler(self.logger)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="mirror")

    def submit(self, row: Dict[str, Any], record_summary: str = '') -> Future:
        """
        Queue one row for the sink.

        Returns:
            Future: Resolves to True if the row was mirrored
        """
        return self._executor.submit(self._append, row, record_summary)

    def _append(self, row: Dict[str, Any], record_summary: str) -> bool:
        try:
            self.sink.append(row)
        except Exception as e:
            self.error_handler.handle_mirror_error(e, record_summary)
            return False
        return True

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting rows; with wait, block until queued rows are written."""
        self._executor.shutdown(wait=wait)
