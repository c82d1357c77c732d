"""
Loads the list of units (schools) offered in the unit selector.
"""
import logging
from typing import List, Optional

from ..config.settings import UNIT_COLUMN
from ..utils.logging_config import ErrorHandler
from ..utils.text import normalize_unit_name
from .notifier import Notifier
from .store_client import StoreAPIError


class UnitCatalogLoader:
    """
    Reads the unit column of the staff table once and keeps the distinct,
    normalized names in store order.
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
        self._units: Optional[List[str]] = None

    def load(self) -> List[str]:
        """
        Return the unit names, querying the store on first call only.

        A store failure yields an empty list and an error notification; the
        empty result is kept, there is no retry.

        Returns:
            List[str]: Distinct non-empty normalized unit names
        """
        if self._units is not None:
            return self._units

        try:
            raw_units = self.store.fetch_column(self.staff_table, UNIT_COLUMN)
        except StoreAPIError as e:
            self.error_handler.handle_store_error(e, "unit catalog")
            self.notifier.error("Could not load units", str(e))
            self._units = []
            return self._units

        units = []
        seen = set()
        for raw in raw_units:
            unit = normalize_unit_name(raw)
            if unit and unit not in seen:
                seen.add(unit)
                units.append(unit)

        self.logger.info(f"Loaded {len(units)} units from {len(raw_units)} staff rows")
        self._units = units
        return self._units
