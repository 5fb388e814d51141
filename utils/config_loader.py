# contractor_dashboard/utils/config_loader.py
import yaml
import os
import logging
import streamlit as st
import gspread
from google.oauth2.service_account import Credentials


logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
SETTINGS_PATH = os.path.join(PROJECT_ROOT, "settings.yaml")

# Environment variable -> (config section, key)
ENV_OVERRIDES = {
    "CATALOG_API_KEY": ("catalog", "api_key"),
    "CATALOG_BASE_URL": ("catalog", "base_url"),
    "BACKEND_URL": ("backend", "url"),
    "BACKEND_API_KEY": ("backend", "api_key"),
}


def get_secret(section, key):
    try:
        return st.secrets[section][key]
    except Exception:
        # st.secrets raises when no secrets.toml exists (tests, standalone scripts)
        return None


@st.cache_resource
def get_gspread_client():
    creds_dict = None
    try:
        creds_dict = dict(st.secrets["google_credentials"])
        logging.info("Successfully loaded Google credentials from st.secrets.")
    except Exception:
        logging.info("st.secrets not available. Falling back to environment variables.")
        private_key = os.environ.get("STREAMLIT_SECRETS_GOOGLE_CREDENTIALS_PRIVATE_KEY", "").replace('\\n', '\n')

        if not all([
            os.environ.get("STREAMLIT_SECRETS_GOOGLE_CREDENTIALS_TYPE"),
            os.environ.get("STREAMLIT_SECRETS_GOOGLE_CREDENTIALS_PROJECT_ID"),
            private_key,
            os.environ.get("STREAMLIT_SECRETS_GOOGLE_CREDENTIALS_CLIENT_EMAIL")
        ]):
            logging.error("One or more required Google credential environment variables are missing.")
            return None

        creds_dict = {
            "type": os.environ.get("STREAMLIT_SECRETS_GOOGLE_CREDENTIALS_TYPE"),
            "project_id": os.environ.get("STREAMLIT_SECRETS_GOOGLE_CREDENTIALS_PROJECT_ID"),
            "private_key_id": os.environ.get("STREAMLIT_SECRETS_GOOGLE_CREDENTIALS_PRIVATE_KEY_ID"),
            "private_key": private_key,
            "client_email": os.environ.get("STREAMLIT_SECRETS_GOOGLE_CREDENTIALS_CLIENT_EMAIL"),
            "client_id": os.environ.get("STREAMLIT_SECRETS_GOOGLE_CREDENTIALS_CLIENT_ID"),
            "auth_uri": os.environ.get("STREAMLIT_SECRETS_GOOGLE_CREDENTIALS_AUTH_URI"),
            "token_uri": os.environ.get("STREAMLIT_SECRETS_GOOGLE_CREDENTIALS_TOKEN_URI"),
            "auth_provider_x509_cert_url": os.environ.get("STREAMLIT_SECRETS_GOOGLE_CREDENTIALS_AUTH_PROVIDER_X509_CERT_URL"),
        }
        logging.info("Successfully loaded Google credentials from environment variables.")

    try:
        creds = Credentials.from_service_account_info(creds_dict, scopes=["https://www.googleapis.com/auth/spreadsheets"])
        client = gspread.authorize(creds)
        logging.info("Successfully connected to Google Sheets API.")
        return client
    except (ValueError, gspread.exceptions.GSpreadException) as e:
        logging.error(f"Failed to connect to Google Sheets API with loaded credentials: {e}")
        return None


def get_settings_from_gsheet(client, spreadsheet_id, worksheet_name):
    """
    Reads 'Section', 'Setting_Key', 'Setting_Value' rows from a worksheet.
    Rows without a section apply to the 'catalog' section.
    """
    try:
        spreadsheet = client.open_by_key(spreadsheet_id)
        worksheet = spreadsheet.worksheet(worksheet_name)
        records = worksheet.get_all_records()
    except gspread.exceptions.WorksheetNotFound:
        logging.error(f"Settings worksheet '{worksheet_name}' not found in the Google Sheet.")
        return {"error": f"Worksheet '{worksheet_name}' not found."}
    except gspread.exceptions.GSpreadException as e:
        logging.error(f"Failed to fetch settings from GSheet: {e}")
        return {"error": str(e)}

    settings = {}
    for row in records:
        if not row.get('Setting_Key'):
            continue
        section = row.get('Section') or 'catalog'
        settings.setdefault(section, {})[row['Setting_Key']] = row.get('Setting_Value')
    logging.info(f"Successfully fetched settings for {len(settings)} section(s) from Google Sheet.")
    return settings


def merge_settings(config, overrides):
    for section, values in overrides.items():
        if isinstance(values, dict):
            config.setdefault(section, {}).update(values)
        else:
            config[section] = values
    return config


def apply_secret_overrides(config):
    """Fills secrets from the environment first, then from st.secrets."""
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = os.getenv(env_name) or get_secret(section, key)
        if value:
            config.setdefault(section, {})[key] = value
            logging.info(f"Loaded {section}.{key} from {'environment' if os.getenv(env_name) else 'secrets'}.")
    return config


def read_app_config(path=SETTINGS_PATH):
    """Loads config from YAML, then secrets, then dynamic settings from Google Sheets."""
    try:
        with open(path, 'r') as f:
            config = yaml.safe_load(f) or {}
    except FileNotFoundError:
        return {"error": f"{os.path.basename(path)} not found."}

    config.setdefault("catalog", {})
    config.setdefault("backend", {})
    apply_secret_overrides(config)

    gsheet_settings = config.get("google_sheet_settings") or {}
    spreadsheet_id = gsheet_settings.get("spreadsheet_id")
    if not spreadsheet_id:
        return config

    gsheet_client = get_gspread_client()
    if gsheet_client is None:
        return {"error": "Failed to connect to Google Sheets."}

    worksheet_name = gsheet_settings.get("worksheet_name")
    if worksheet_name:
        dynamic_settings = get_settings_from_gsheet(gsheet_client, spreadsheet_id, worksheet_name)
        if "error" in dynamic_settings:
            return dynamic_settings
        merge_settings(config, dynamic_settings)

    return config


@st.cache_data(show_spinner=False)
def load_app_config():
    return read_app_config()


APP_CONFIG = load_app_config()
