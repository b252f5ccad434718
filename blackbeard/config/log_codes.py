"""
Log codes for configuration-related operations.
"""

CONFIG = "config"

# Settings resolution
SETTINGS = f"{CONFIG}.settings"
SETTINGS_RESOLVED = f"{SETTINGS}.resolved"
SETTINGS_FILE_MISSING = f"{SETTINGS}.file_missing"
SETTINGS_FILE_INVALID = f"{SETTINGS}.file_invalid"
SETTINGS_MISSING_SECTION = f"{SETTINGS}.missing_section"
SETTINGS_INVALID_VALUE = f"{SETTINGS}.invalid_value"
SETTINGS_SAVED = f"{SETTINGS}.saved"
