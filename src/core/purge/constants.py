"""Purge engine constants.

Platform limits are fixed by Discord. Pacing defaults live in
``src.config`` because operators tune them per deployment.
"""

from typing import Final

# Bulk delete accepts between 2 and 100 message ids per call.
BULK_DELETE_MAX_MESSAGES: Final[int] = 100
BULK_DELETE_MIN_MESSAGES: Final[int] = 2

# History pages are capped at 100 messages by the API.
HISTORY_PAGE_SIZE: Final[int] = 100

# Candidates must be at least this old.
DEFAULT_RETENTION_DAYS: Final[int] = 7

# Bulk delete refuses messages older than 14 days. Planning uses 13.5
# days so a plan stays valid for a while after it is computed.
DEFAULT_BULK_CUTOFF_HOURS: Final[int] = 13 * 24 + 12
BULK_DELETE_MAX_AGE_DAYS: Final[int] = 14

DEFAULT_RATE_LIMIT: Final[int] = 500
DEFAULT_WINDOW_SECONDS: Final[float] = 60.0
DEFAULT_CONFIRMATION_TIMEOUT_SECONDS: Final[float] = 120.0

# custom_id layout: purge:<token>:<choice>
CONFIRMATION_CUSTOM_ID_PREFIX: Final[str] = "purge"
