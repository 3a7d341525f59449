"""Internal constants shared across the library."""

BACKEND_URL = "http://localhost:8001"
BACKEND_PREFIX = "/___backend"
CLIENT_ID_HEADER = "x-bl-clientid"

# Compound keys are path segments joined by this delimiter.
NODE_CHILD_DELIMITER = "$"

# Reserved field carrying the origin stamp inside serialized node content.
META_KEY = "___meta"

# ------------------------------------------------------------------
# Resource path layout
# ------------------------------------------------------------------

PAGE_COLLECTION = "Page"
PAGES_ROOT = "pages"
SITE_ROOT = "site"
TEMPLATES_DIR = "___templates"

# ------------------------------------------------------------------
# Flush timing (seconds)
# ------------------------------------------------------------------

DEFAULT_DEBOUNCE_DELAY: float = 2.0
DEFAULT_COOLDOWN_DELAY: float = 5.0
