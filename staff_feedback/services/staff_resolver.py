"""
Resolves a unit name to the ordered roster of staff working there.
"""
import logging
from typing import List, Optional

from ..config.settings import STAFF_NAME_COLUMN, UNIT_COLUMN, staff_select_clause
from ..models.staff_record import StaffRecord
from ..utils.logging_config import ErrorHandler
from ..utils.text import build_unit_pattern, contains_unit_name, normalize_unit_name
from .notifier import Notifier
from .store_client import StoreAPIError


class StaffResolver:
    """
    Looks staff up by unit with two strategies.

    1. Exact match on the unit column. The unit catalog is read from the
       same column, so this covers the usual case.
    2. Only when (1) finds nothing: a case-insensitive substring match with
       LIKE wildcards in the unit name escaped, tolerating case and
       whitespace drift between the catalog and live data.

    Both strategies sort by staff name ascending.
    """

    def __init__(self,
                 store,
                 staff_table: str,
                 notifier: Notifier,
                 error_handler: Optional[ErrorHandler] = None):
        self.store = store
        self.staff_table = staff_table
        self.notifier = notifier
        self.logger = logging.getLogger(__name__)
        self.error_handler = error_handler or ErrorHandler(self.logger)
        self.select = staff_select_clause()

    def resolve(self, unit_name: str) -> List[StaffRecord]:
        """
        Build the roster for a unit.

        Args:
            unit_name: Unit to look up; normalized before querying

        Returns:
            List[StaffRecord]: Staff sorted by name; empty on store failure
        """
        unit = normalize_unit_name(unit_name)
        if not unit:
            return []

        try:
            rows = self._find_exact(unit)
            if not rows:
                rows = self._find_similar(unit)
        except StoreAPIError as e:
            self.error_handler.handle_store_error(e, "roster", context=unit)
            self.notifier.error(
                "Could not load staff",
                f"Staff for unit '{unit}' could not be loaded: {e}"
            )
            return []

        return [StaffRecord.from_row(row) for row in rows]

    def _find_exact(self, unit: str) -> list:
        rows = self.store.select_eq(
            self.staff_table, self.select, UNIT_COLUMN, unit, order_by=STAFF_NAME_COLUMN
        )
        self.logger.info(f"Exact unit match for '{unit}': {len(rows)} staff")
        return rows

    def _find_similar(self, unit: str) -> list:
        """
        Case-insensitive substring lookup.

        The store pattern lets runs of whitespace in the stored value match
        the single spaces of the normalized name; rows are then narrowed to
        those whose normalized unit literally contains the name.
        """
        pattern = build_unit_pattern(unit)
        rows = self.store.select_ilike(
            self.staff_table, self.select, UNIT_COLUMN, pattern, order_by=STAFF_NAME_COLUMN
        )
        matched = [row for row in rows if contains_unit_name(row.get(UNIT_COLUMN), unit)]
        self.logger.info(
            f"Fallback unit match for '{unit}' (pattern {pattern!r}): "
            f"{len(matched)} of {len(rows)} candidate staff"
        )
        return matched
