"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

TOKEN_TTL_HOURS = 24
TOKEN_ALGORITHM = "HS256"
MIN_PASSWORD_LENGTH = 6
RECENT_REPORT_DAYS = 7
AVATAR_URL = "https://ui-avatars.com/api/?name={first}+{last}"
