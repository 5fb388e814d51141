# contractor_dashboard/connectors/backend_connector.py
import requests
import pandas as pd
import logging

logger = logging.getLogger(__name__)


def _response_text(error):
    response = getattr(error, "response", None)
    return response.text if response is not None else "no response"


def build_filters(filters):
    """Turns {'status': 'active', 'id': [1, 2]} into PostgREST query params."""
    params = {}
    for column, value in (filters or {}).items():
        if isinstance(value, (list, tuple, set)):
            params[column] = f"in.({','.join(str(v) for v in value)})"
        elif value is None:
            params[column] = "is.null"
        else:
            params[column] = f"eq.{value}"
    return params


class BackendConnector:
    def __init__(self, api_key, base_url):
        if not api_key:
            logger.error("Backend API key is not provided.")
            raise ValueError("Backend API key is required.")
        if not base_url:
            logger.error("Backend URL is not provided.")
            raise ValueError("Backend URL is required.")
        self.base_url = base_url.rstrip('/')
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
        }

    def _table_url(self, table):
        return f"{self.base_url}/rest/v1/{table}"

    def select_rows(self, table, filters=None, order=None, columns="*"):
        all_rows = []
        offset = 0
        size = 1000  # Default max rows per request on the backend
        while True:
            params = {"select": columns, "limit": size, "offset": offset}
            params.update(build_filters(filters))
            if order:
                params["order"] = order
            try:
                response = requests.get(self._table_url(table), headers=self.headers, params=params)
                response.raise_for_status()
                results = response.json()
                all_rows.extend(results)
                if len(results) < size:
                    break
                offset += size
            except requests.exceptions.RequestException as e:
                logger.error(f"Error fetching rows from table '{table}' at offset {offset}: {e}")
                raise
        return all_rows

    def get_table_as_dataframe(self, table, filters=None, order=None):
        logger.info(f"Fetching data for table '{table}'")
        try:
            rows = self.select_rows(table, filters=filters, order=order)
            if not rows:
                logger.warning(f"No data found in table '{table}'.")
                return pd.DataFrame()
            df = pd.DataFrame(rows)
            logger.info(f"Successfully fetched {len(df)} rows from table '{table}'.")
            return df
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"Failed to get data for table '{table}': {e}")
            return pd.DataFrame()

    def get_row(self, table, row_id):
        rows = self.select_rows(table, filters={"id": row_id})
        return rows[0] if rows else None

    def count_rows(self, table, filters=None):
        """
        Counts rows using the exact count reported in the Content-Range header.
        :return: The row count, or None on failure.
        """
        params = {"select": "id"}
        params.update(build_filters(filters))
        headers = dict(self.headers, Prefer="count=exact", Range="0-0")
        try:
            response = requests.get(self._table_url(table), headers=headers, params=params)
            response.raise_for_status()
            content_range = response.headers.get("Content-Range", "")
            total = content_range.rsplit('/', 1)[-1]
            return int(total) if total.isdigit() else None
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to count rows in table '{table}': {e}")
            return None

    def update_row(self, table, row_id, updates):
        """
        Updates a single row.
        :param updates: A dictionary of column -> new value.
        :return: The updated rows or None on failure.
        """
        headers = dict(self.headers, Prefer="return=representation")
        params = build_filters({"id": row_id})
        try:
            response = requests.patch(self._table_url(table), headers=headers, params=params, json=updates)
            response.raise_for_status()
            logger.info(f"Successfully updated row {row_id} in table '{table}'.")
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to update row {row_id} in table '{table}': {e} - Response: {_response_text(e)}")
            return None

    def delete_rows(self, table, row_ids):
        """
        Deletes rows by id in batches of 200.
        :return: True on success, False on failure.
        """
        if not row_ids:
            logger.info(f"Table '{table}': No row IDs provided for deletion.")
            return True

        row_ids = list(row_ids)
        batch_size = 200
        for i in range(0, len(row_ids), batch_size):
            chunk_of_ids = row_ids[i:i + batch_size]
            params = build_filters({"id": chunk_of_ids})
            logger.info(f"Table '{table}': Deleting chunk {i//batch_size + 1}, containing {len(chunk_of_ids)} row IDs.")
            try:
                response = requests.delete(self._table_url(table), headers=self.headers, params=params)
                response.raise_for_status()
            except requests.exceptions.RequestException as e:
                logger.error(f"Failed to delete chunk from table '{table}': {e} - Response: {_response_text(e)}")
                return False  # Stop on the first failed chunk
        return True
