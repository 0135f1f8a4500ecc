"""
config.py - Configuration Management
=====================================
This module loads and validates the settings of the batch query tool.
Settings come from a .env file (by default in the current working directory)
and are returned as a Settings object that the caller passes to every
component that needs it.

If the file does not exist yet, a template is written in its place and
ConfigCreatedError is raised so the user can fill it in and run again.

Keys Used:
----------
- KDNIAO_EBUSINESS_ID  : (Required) API user identifier (EBusinessID)
- KDNIAO_API_KEY       : (Required) Key used to sign every request
- KDNIAO_API_URL       : (Required) Tracking API endpoint
- KDNIAO_RATE_LIMIT    : (Optional) Max requests per minute, 0 = unlimited (default: 60)
- KDNIAO_TIMEOUT_SEC   : (Optional) Request timeout in seconds (default: 20)
- KDNIAO_SHEET_NAME    : (Optional) Sheet to read and write (default: "Sheet1")
- KDNIAO_COURIER_INPUT : (Optional) "code" or "name", how column A is read (default: "code")
- KDNIAO_COURIER_MAP   : (Optional) Name-to-code table, e.g. "SF Express=SF,JD Logistics=JD"

Example .env file:
------------------
KDNIAO_EBUSINESS_ID=1234567
KDNIAO_API_KEY=56da2cf8-c8a2-44b2-b6fa-476cd7d1ba17
KDNIAO_API_URL=https://api.kdniao.com/Ebusiness/EbusinessOrderHandle.aspx
"""

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Dict
from dotenv import dotenv_values


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = ".env"

# Placeholder written into a fresh template; treated as "not configured"
NOT_SET = "not-set"

COURIER_INPUT_MODES = ("code", "name")

CONFIG_TEMPLATE = f"""\
# Tracking API credentials
KDNIAO_EBUSINESS_ID={NOT_SET}
KDNIAO_API_KEY={NOT_SET}
KDNIAO_API_URL={NOT_SET}

# Max requests per minute (0 = no throttling)
KDNIAO_RATE_LIMIT=60
KDNIAO_TIMEOUT_SEC=20

# Sheet read from and written back to
KDNIAO_SHEET_NAME=Sheet1

# How column A of the sheet is interpreted: "code" or "name"
KDNIAO_COURIER_INPUT=code
# Used when KDNIAO_COURIER_INPUT=name, e.g. SF Express=SF,JD Logistics=JD
KDNIAO_COURIER_MAP=
"""


class ConfigCreatedError(RuntimeError):
    """No configuration file existed; a template has just been written."""


# =============================================================================
# SETTINGS DATACLASS
# =============================================================================

@dataclass
class Settings:
    """Container for all application configuration values."""

    # Required: API identifier sent as EBusinessID
    ebusiness_id: str

    # Required: signing key (never sent, only hashed into DataSign)
    api_key: str

    # Required: full endpoint URL
    api_url: str

    # Requests per minute; 0 turns throttling off
    rate_limit: int = 60

    timeout_sec: int = 20

    sheet_name: str = "Sheet1"

    # "code": column A already holds the courier code
    # "name": column A holds a name that is looked up in courier_map
    courier_input: str = "code"

    courier_map: Dict[str, str] = field(default_factory=dict)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _clean(v: str | None) -> str | None:
    """
    Clean and normalize a configuration value.

    Examples:
        _clean('  hello  ')     -> 'hello'
        _clean('"quoted"')      -> 'quoted'
        _clean('')              -> None
        _clean(None)            -> None
    """
    if v is None:
        return None

    v = v.strip()

    if (v.startswith('"') and v.endswith('"')) or (v.startswith("'") and v.endswith("'")):
        v = v[1:-1]

    return v if v else None


def _required(values: dict, key: str) -> str:
    value = _clean(values.get(key))
    if not value or value == NOT_SET:
        raise RuntimeError(f"{key} is not set. Please fill it in your configuration file.")
    return value


def _integer(values: dict, key: str, default: int) -> int:
    raw = _clean(values.get(key))
    if raw is None:
        return default
    try:
        number = int(raw)
    except ValueError:
        raise ValueError(f"{key} must be a whole number, got {raw!r}") from None
    if number < 0:
        raise ValueError(f"{key} must not be negative, got {number}")
    return number


def parse_courier_map(raw: str | None) -> Dict[str, str]:
    """
    Parse a "Name=CODE,Name=CODE" table into a dict.

    Examples:
        parse_courier_map("SF Express=SF, JD=JD") -> {"SF Express": "SF", "JD": "JD"}
        parse_courier_map(None)                   -> {}

    Raises:
        ValueError: If an entry has no "=" or an empty side
    """
    table = {}
    if not raw:
        return table

    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        name, sep, code = entry.partition("=")
        name, code = name.strip(), code.strip()
        if not sep or not name or not code:
            raise ValueError(f"Invalid courier map entry {entry!r}, expected Name=CODE")
        table[name] = code

    return table


def write_template(path: Path):
    path.write_text(CONFIG_TEMPLATE, encoding="utf-8")


# =============================================================================
# MAIN CONFIGURATION LOADER
# =============================================================================

def load_settings(config_path: str | Path | None = None) -> Settings:
    """
    Load application configuration from a .env file.

    Args:
        config_path: Configuration file to read (default: ./.env)

    Returns:
        Settings: A dataclass containing all configuration values

    Raises:
        ConfigCreatedError: If the file was missing and a template was written
        RuntimeError: If a required key is blank or still a placeholder
        ValueError: If a numeric key, the courier mode or the map is malformed
    """
    # ---------------------------------------------------------------------
    # STEP 1: Locate the file, bootstrap a template on first run
    # ---------------------------------------------------------------------
    path = Path(config_path) if config_path else Path.cwd() / DEFAULT_CONFIG_NAME

    if not path.exists():
        write_template(path)
        raise ConfigCreatedError(
            f"Configuration file created, please complete it: {path.resolve()}"
        )

    values = dotenv_values(path)
    logger.debug(f"Loaded configuration keys from {path}: {sorted(values)}")

    # ---------------------------------------------------------------------
    # STEP 2: Required credentials and endpoint
    # ---------------------------------------------------------------------
    ebusiness_id = _required(values, "KDNIAO_EBUSINESS_ID")
    api_key = _required(values, "KDNIAO_API_KEY")
    api_url = _required(values, "KDNIAO_API_URL")

    if not api_url.startswith("http"):
        api_url = "https://" + api_url

    # ---------------------------------------------------------------------
    # STEP 3: Courier identifier mode
    # ---------------------------------------------------------------------
    courier_input = (_clean(values.get("KDNIAO_COURIER_INPUT")) or "code").lower()
    if courier_input not in COURIER_INPUT_MODES:
        raise ValueError(
            f"KDNIAO_COURIER_INPUT must be one of {COURIER_INPUT_MODES}, got {courier_input!r}"
        )

    courier_map = parse_courier_map(_clean(values.get("KDNIAO_COURIER_MAP")))
    if courier_input == "name" and not courier_map:
        raise RuntimeError("KDNIAO_COURIER_INPUT=name requires KDNIAO_COURIER_MAP to be set.")

    # ---------------------------------------------------------------------
    # STEP 4: Build and return the Settings object
    # ---------------------------------------------------------------------
    return Settings(
        ebusiness_id=ebusiness_id,
        api_key=api_key,
        api_url=api_url,
        rate_limit=_integer(values, "KDNIAO_RATE_LIMIT", 60),
        timeout_sec=_integer(values, "KDNIAO_TIMEOUT_SEC", 20),
        sheet_name=_clean(values.get("KDNIAO_SHEET_NAME")) or "Sheet1",
        courier_input=courier_input,
        courier_map=courier_map,
    )


def resolve_courier(raw: str, settings: Settings) -> str | None:
    """
    Turn column A of the input sheet into the courier code sent to the API.

    In "code" mode the value is used as-is; in "name" mode it is looked up in
    settings.courier_map and None is returned when it is not there.
    """
    raw = (raw or "").strip()
    if settings.courier_input == "code":
        return raw or None
    return settings.courier_map.get(raw)
