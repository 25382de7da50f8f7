#!/usr/bin/env python3
"""
Project Configuration
Loads settings from the .env file in the project root into an AppConfig
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_SCRIPT_URL = ''
DEFAULT_QR_BASE_URL = 'https://quickchart.io/qr'


class ConfigError(Exception):
    """Invalid configuration value"""
    pass


@dataclass
class AppConfig:
    """Everything the services need, injected at construction"""
    sheet_id: str = ''
    purchases_sheet_name: str = 'Hoja 1'
    events_sheet_name: str = 'Hoja 2'
    script_url: str = DEFAULT_SCRIPT_URL
    google_service_account_file: Optional[str] = None
    # Resolve columns from the header row instead of fixed positions
    use_header_columns: bool = False

    qr_base_url: str = DEFAULT_QR_BASE_URL
    qr_size: int = 512
    country_code: str = '54'
    organizer_phone: str = ''

    cache_ttl_seconds: float = 30.0
    event_load_attempts: int = 3
    event_load_retry_delay: float = 2.0
    request_timeout: float = 10.0

    # Storefront prices when an order is not tied to an event
    default_ticket_price: float = 5000.0
    default_vip_price: float = 2000.0

    # username -> (password, role)
    admin_users: Dict[str, Tuple[str, str]] = field(default_factory=dict)
    secret_key: str = 'dev-key-change-in-production'

    project_root: str = ''
    logs_dir: Optional[str] = None


def get_project_root():
    """Get absolute path to project root directory"""
    current_dir = os.path.dirname(os.path.abspath(__file__))
    return os.path.dirname(current_dir)


def parse_admin_users(raw: Optional[str]) -> Dict[str, Tuple[str, str]]:
    """Parse 'user:password:role,user2:password2' into the credential table"""
    users = {}
    if not raw:
        return users

    for entry in raw.split(','):
        entry = entry.strip()
        if not entry:
            continue
        parts = entry.split(':')
        if len(parts) not in (2, 3) or not parts[0] or not parts[1]:
            raise ConfigError(f"Invalid ADMIN_USERS entry: {entry!r}")
        role = parts[2] if len(parts) == 3 and parts[2] else 'admin'
        users[parts[0]] = (parts[1], role)
    return users


def _get_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == '':
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {value!r}")


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == '':
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}")


def load_project_config(env_path: Optional[str] = None) -> AppConfig:
    """
    Load configuration from .env file in project root
    Missing file is not fatal, values already in the environment still apply
    """
    project_root = get_project_root()
    env_path = env_path or os.path.join(project_root, '.env')

    if os.path.exists(env_path):
        load_dotenv(env_path)
        logger.info(f"Configuration loaded from {env_path}")
    else:
        logger.warning(f"Environment file not found: {env_path}, using process environment")

    config = AppConfig(
        # Google Sheets
        sheet_id=os.getenv('SHEET_ID', ''),
        purchases_sheet_name=os.getenv('PURCHASES_SHEET_NAME', 'Hoja 1'),
        events_sheet_name=os.getenv('EVENTS_SHEET_NAME', 'Hoja 2'),
        script_url=os.getenv('SHEETS_WEBAPP_URL', DEFAULT_SCRIPT_URL),
        google_service_account_file=os.getenv('GOOGLE_SERVICE_ACCOUNT_FILE') or None,
        use_header_columns=os.getenv('USE_HEADER_COLUMNS', '').strip().lower() in ('1', 'true', 'yes'),

        # QR and WhatsApp
        qr_base_url=os.getenv('QR_BASE_URL', DEFAULT_QR_BASE_URL),
        qr_size=_get_int('QR_SIZE', 512),
        country_code=os.getenv('COUNTRY_CODE', '54'),
        organizer_phone=os.getenv('ORGANIZER_PHONE', ''),

        # Loading behaviour
        cache_ttl_seconds=_get_float('CACHE_TTL_SECONDS', 30.0),
        event_load_attempts=_get_int('EVENT_LOAD_ATTEMPTS', 3),
        event_load_retry_delay=_get_float('EVENT_LOAD_RETRY_DELAY', 2.0),
        request_timeout=_get_float('REQUEST_TIMEOUT', 10.0),

        # Storefront
        default_ticket_price=_get_float('DEFAULT_TICKET_PRICE', 5000.0),
        default_vip_price=_get_float('DEFAULT_VIP_PRICE', 2000.0),

        # Admin
        admin_users=parse_admin_users(os.getenv('ADMIN_USERS')),
        secret_key=os.getenv('FLASK_SECRET_KEY', 'dev-key-change-in-production'),

        project_root=project_root,
        logs_dir=os.getenv('LOGS_DIR') or None,
    )

    if not config.sheet_id:
        logger.warning("SHEET_ID is not set, sheet reads will return no data")
    if not config.admin_users:
        logger.warning("ADMIN_USERS is empty, nobody can sign in to the admin API")

    return config
