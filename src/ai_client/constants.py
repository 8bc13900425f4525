"""
Project-wide constants for the ai-client package
"""  # noqa: D200, D212, D415

# ==============================================================================
# Model Defaults
# ==============================================================================

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TOP_P = 0.95
DEFAULT_CANDIDATE_COUNT = 1

MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 1.0

# ==============================================================================
# API and Network Configuration
# ==============================================================================

# Retry settings
MAX_RETRIES = 3
RETRY_INITIAL_DELAY = 30.0  # seconds
RETRY_MAX_DELAY = 120.0  # seconds

# Per-call deadline applied by the client and the runner
DEFAULT_REQUEST_TIMEOUT = 60.0  # seconds

# ==============================================================================
# File Offload Configuration
# ==============================================================================

_KB = 1024

# Inline parts larger than this are moved to the Files API
FILE_OFFLOAD_THRESHOLD = 512 * _KB
FILE_POLL_INTERVAL = 2.0  # seconds
FILE_PROCESSING_TIMEOUT = 60.0  # seconds
FILE_DISPLAY_NAME_PREFIX = "ai-client-auto"

# ==============================================================================
# Environment
# ==============================================================================

API_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY")
