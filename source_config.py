"""
Shared data-source configuration for the API and scripts.
Reads settings from .env file or environment variables.
"""
import os
from pathlib import Path

import requests
from dotenv import load_dotenv

# Load .env from project root (already-set variables win)
_env_path = Path(__file__).resolve().parent / '.env'
if _env_path.exists():
    load_dotenv(_env_path, override=False)

SOURCE_API_URL = os.environ.get('SOURCE_API_URL', 'http://localhost:4000')
SOURCE_API_TOKEN = os.environ.get('SOURCE_API_TOKEN', '')
SOURCE_PER_PAGE = int(os.environ.get('SOURCE_PER_PAGE', '1000'))
SOURCE_TIMEOUT = float(os.environ.get('SOURCE_TIMEOUT', '30'))
SOURCE_MAX_PAGES = int(os.environ.get('SOURCE_MAX_PAGES', '50'))
SOURCE_DATA_DIR = os.environ.get('SOURCE_DATA_DIR', '')

SOURCE_CONFIG = {
    'base_url': SOURCE_API_URL,
    'per_page': SOURCE_PER_PAGE,
    'timeout': SOURCE_TIMEOUT,
    'max_pages': SOURCE_MAX_PAGES,
}


def get_session(token=None):
    """Get a requests session for the data-access layer using shared config."""
    session = requests.Session()
    session.headers.update({'Accept': 'application/json'})
    token = token if token is not None else SOURCE_API_TOKEN
    if token:
        session.headers['Authorization'] = f'Bearer {token}'
    return session


def get_repository(data_dir=None):
    """File repository when a data directory is configured, HTTP otherwise."""
    from reporting import FileRepository, HttpRepository

    data_dir = data_dir if data_dir is not None else SOURCE_DATA_DIR
    if data_dir:
        return FileRepository(data_dir)
    return HttpRepository(session=get_session(), **SOURCE_CONFIG)
