"""Internal constants shared across the library."""

NMEA_MARKER = "$"
AIS_MARKER = "!AIVDM"
CHECKSUM_DELIMITER = "*"

#: Header length of an NMEA sentence: ``$`` + 2-char talker + 3-char type.
NMEA_HEADER_LENGTH = 6

DEFAULT_PORT = 3100
DEFAULT_DATABASE_URL = "sqlite:///shiplog.db"

#: Raw NMEA lines kept per connection while waiting for an accepted snapshot.
MAX_ARCHIVED_SENTENCES = 1000

# ------------------------------------------------------------------
# AIS bit layout (class-A position report, ITU-R M.1371)
# ------------------------------------------------------------------

AIS_MIN_FIELDS = 7
AIS_MESSAGE_TYPE_BITS = (0, 6)
AIS_NAV_STATUS_BITS = (38, 4)
AIS_POSITION_REPORT_TYPES: frozenset[int] = frozenset({1, 2, 3})

# ------------------------------------------------------------------
# Unit conversions
# ------------------------------------------------------------------

HPA_PER_BAR = 1000.0

# Two-digit NMEA years at or above this value belong to the 1900s (GPS era
# starts 1980).
TWO_DIGIT_YEAR_PIVOT = 80
