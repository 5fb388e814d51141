# contractor_dashboard/utils/data_loader.py
import logging
import streamlit as st
import requests
from connectors.catalog_connector import CatalogConnector, CatalogError
from connectors.backend_connector import BackendConnector
from services.catalog_sync import CatalogSync
from services.project_tracker import Project
from utils.config_loader import APP_CONFIG

logger = logging.getLogger(__name__)

PROJECT_COLUMNS = "*,files:project_files(id,file_name,file_url)"


def config_error():
    """Returns the configuration error message, if any."""
    return APP_CONFIG.get("error")


@st.cache_resource
def get_catalog_connector():
    catalog_config = APP_CONFIG.get('catalog', {})
    return CatalogConnector(
        api_key=catalog_config.get('api_key'),
        base_url=catalog_config.get('base_url'),
        timeout=catalog_config.get('timeout'),
    )


@st.cache_resource
def get_backend_connector():
    backend_config = APP_CONFIG.get('backend', {})
    return BackendConnector(
        api_key=backend_config.get('api_key'),
        base_url=backend_config.get('url'),
    )


def get_catalog_session(session_key, field_config):
    """One CatalogSync per browser session and catalog view."""
    if session_key not in st.session_state:
        st.session_state[session_key] = CatalogSync(get_catalog_connector(), field_config)
    return st.session_state[session_key]


@st.cache_data(ttl=600)
def load_projects():
    """Fetches all projects with their attached files, newest first. Returns an empty list on failure."""
    table = APP_CONFIG.get('backend', {}).get('projects_table', 'projects')
    try:
        rows = get_backend_connector().select_rows(table, order="created_at.desc", columns=PROJECT_COLUMNS)
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error(f"Failed to load projects: {e}")
        st.error("Error al cargar los proyectos.")
        return []
    return [Project.from_row(row) for row in rows]


@st.cache_data(ttl=600)
def load_client(client_id):
    """Returns the client row for `client_id`, or None when it is missing or cannot be read."""
    if not client_id:
        return None
    table = APP_CONFIG.get('backend', {}).get('clients_table', 'clients')
    try:
        return get_backend_connector().get_row(table, client_id)
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error(f"Failed to load client {client_id}: {e}")
        return None


# Downloads a whole page (up to 1000 records) only to read total_count.
# The feed has no count-only request.
@st.cache_data(ttl=3600)
def load_catalog_total():
    try:
        return get_catalog_connector().fetch_page(0).total_count
    except CatalogError as e:
        logger.error(f"Could not read catalog total: {e}")
        return None


@st.cache_data(ttl=600)
def load_dashboard_counts():
    backend_config = APP_CONFIG.get('backend', {})
    connector = get_backend_connector()
    return {
        "active_projects": connector.count_rows(backend_config.get('projects_table', 'projects'), {"status": "active"}),
        "clients": connector.count_rows(backend_config.get('clients_table', 'clients')),
    }
