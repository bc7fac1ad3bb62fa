import os
from typing import Optional

# Set once per process by init_testing() or init_production()
TESTING: bool = False
INITIALIZED: bool = False

SRC_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(SRC_DIR)

CONFIG_DIR = os.path.join(PROJECT_ROOT, "config")
KEY_DIR = os.path.join(PROJECT_ROOT, "keys")
LOG_DIR = os.path.join(PROJECT_ROOT, "logs")
REQUEST_LOG_DIR = os.path.join(LOG_DIR, "requests")

# Uploaded blog images are written here and served from the site root
PUBLIC_DIR = os.path.join(PROJECT_ROOT, "public")

# Used when the configuration names no database_url
_PROD_DB_PATH = os.path.join(PROJECT_ROOT, "blogdesk.db")
_DEFAULT_TEST_DB = "sqlite:///:memory:"
_TEST_DB_PATH: str = _DEFAULT_TEST_DB

def is_development_mode() -> bool:
    """True when FLASK_ENV is 'development' (set by launch.py --dev)."""
    return os.getenv('FLASK_ENV', 'production').lower() == 'development'

def init_testing(test_db_path: Optional[str] = None) -> None:
    """
    Switch to testing mode.

    :param test_db_path: Database URL for the tests, in-memory SQLite by default
    """
    global TESTING, INITIALIZED, _TEST_DB_PATH
    TESTING = True
    INITIALIZED = True
    _TEST_DB_PATH = test_db_path or _DEFAULT_TEST_DB

def init_production() -> None:
    global TESTING, INITIALIZED
    TESTING = False
    INITIALIZED = True
