"""Application constants."""

USER_AGENT = "rural-explorer/2.4 (+listings dashboard)"

# Exact spreadsheet headers agreed with the listings producer.
DEFAULT_HEADERS = {
    "address": "Address",
    "city": "City",
    "state": "State",
    "price": "Price",
    "area_size": "Acres",
    "category": "Type",
    "latitude": "Latitude",
    "longitude": "Longitude",
    "travel_distance": "Drive Dist (mi)",
    "relevance_score": "LLM Score",
    "listing_url": "Property URL Link",
}

DEFAULT_PLACEHOLDERS = {
    "address": "Unnamed",
    "category": "Land",
    "url": "#",
}

SOURCE_PATH_TEMPLATES = (
    "data/list/{name}.xlsx",
    "data/{name}.xlsx",
    "{name}.xlsx",
)

TOP_N = 3
HIGHLIGHT_SCORE = 90
MAX_SKIPPED_SAMPLES = 50

COMMANDS = ("summary", "view-model", "snapshots")
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "level",
    "run_id",
    "stage",
    "snapshot",
    "event",
    "status",
    "attempt",
    "duration_ms",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
