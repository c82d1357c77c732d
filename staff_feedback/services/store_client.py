"""
Supabase (PostgREST) client for the staff and feedback tables.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from ..config.config_manager import ConfigManager
from ..config.settings import quote_column


class StoreAPIError(Exception):
    """Exception raised for primary store errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SupabaseStoreClient:
    """
    Client for the Supabase REST interface.

    Supports the two lookups the form needs over the staff table (column
    equality and case-insensitive LIKE, both ordered ascending), reading one
    column for the unit catalog, and inserting feedback rows. Requests are
    not retried.
    """

    def __init__(self, config_manager: ConfigManager, session: Optional[requests.Session] = None):
        """
        Initialize the store client.

        Args:
            config_manager: Configuration manager instance
            session: Optional pre-built requests session
        """
        self.config = config_manager
        self.logger = logging.getLogger(__name__)

        self.base_url = f"{self.config.get_supabase_url()}/rest/v1"
        self.timeout = self.config.get_request_timeout()

        self.session = session or requests.Session()
        self._setup_session()

        self.logger.info(f"Store client initialized for {self.base_url}")

    def _setup_session(self) -> None:
        """Set the authentication headers PostgREST expects."""
        api_key = self.config.get_supabase_key()
        self.session.headers.update({
            'apikey': api_key,
            'Authorization': f'Bearer {api_key}',
            'Content-Type': 'application/json',
            'User-Agent': 'StaffFeedbackForm/1.0'
        })

    def fetch_column(self, table: str, column: str) -> List[Any]:
        """
        Read one column of every non-null row, ordered ascending.

        Args:
            table: Table name
            column: Column to read

        Returns:
            List of raw column values
        """
        params = {
            'select': quote_column(column),
            column: 'not.is.null',
            'order': f'{quote_column(column)}.asc',
        }
        rows = self._get(table, params)
        return [row.get(column) for row in rows]

    def select_eq(self, table: str, select: str, column: str, value: str, order_by: str) -> List[Dict[str, Any]]:
        """
        Select rows whose column equals value exactly.

        Args:
            table: Table name
            select: PostgREST select clause
            column: Column to compare
            value: Value to match
            order_by: Column to sort ascending by

        Returns:
            List of row dicts
        """
        params = {
            'select': select,
            column: f'eq.{value}',
            'order': f'{quote_column(order_by)}.asc',
        }
        return self._get(table, params)

    def select_ilike(self, table: str, select: str, column: str, pattern: str, order_by: str) -> List[Dict[str, Any]]:
        """
        Select rows whose column matches a case-insensitive LIKE pattern.

        The pattern is passed through unchanged; callers escape literal
        wildcard characters.

        Args:
            table: Table name
            select: PostgREST select clause
            column: Column to compare
            pattern: ILIKE pattern using % and _ wildcards
            order_by: Column to sort ascending by

        Returns:
            List of row dicts
        """
        params = {
            'select': select,
            column: f'ilike.{pattern}',
            'order': f'{quote_column(order_by)}.asc',
        }
        return self._get(table, params)

    def insert(self, table: str, rows: List[Dict[str, Any]]) -> None:
        """
        Insert rows into a table.

        Args:
            table: Table name
            rows: Row dicts to insert

        Raises:
            StoreAPIError: If the insert is rejected or the request fails
        """
        self._request(
            'POST',
            table,
            json=rows,
            headers={'Prefer': 'return=minimal'}
        )
        self.logger.info(f"Inserted {len(rows)} row(s) into {table}")

    def _get(self, table: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        response = self._request('GET', table, params=params)
        try:
            data = response.json()
        except ValueError as e:
            raise StoreAPIError(f"Invalid JSON from store for table {table}: {e}") from e

        if not isinstance(data, list):
            raise StoreAPIError(f"Unexpected response shape from store for table {table}")
        return data

    def _request(self, method: str, table: str, **kwargs) -> requests.Response:
        """
        Send one request to the store.

        Args:
            method: HTTP method
            table: Table name appended to the REST base URL
            **kwargs: Additional request parameters

        Returns:
            requests.Response: Successful response

        Raises:
            StoreAPIError: If the request fails or returns a non-2xx status
        """
        url = f"{self.base_url}/{table}"
        self.logger.debug(f"{method} {url} params={kwargs.get('params')}")

        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            raise StoreAPIError(f"Store request timed out after {self.timeout}s: {e}") from e
        except requests.exceptions.RequestException as e:
            raise StoreAPIError(f"Store request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise StoreAPIError(
                f"Store returned HTTP {response.status_code} for {method} {table}: {self._error_detail(response)}",
                status_code=response.status_code
            )
        return response

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        """Extract the PostgREST error message if there is one."""
        try:
            payload = response.json()
        except ValueError:
            return response.text[:200]
        if isinstance(payload, dict):
            return payload.get('message') or payload.get('hint') or str(payload)[:200]
        return str(payload)[:200]

