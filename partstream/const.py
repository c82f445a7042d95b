"""Constants for partstream."""

BYTES_PER_MIB = 1024 * 1024

# Multipart services reject non-final parts below this size
MIN_PART_SIZE = 5 * BYTES_PER_MIB
DEFAULT_PART_SIZE = MIN_PART_SIZE
DEFAULT_CONCURRENT_PARTS = 1

# Size of each read when piping a file object into an engine
DEFAULT_READ_SIZE = 64 * 1024

DEFAULT_PRESIGNED_URL_EXPIRY_SECONDS = 3600
DEFAULT_PART_TIMEOUT_SECONDS = 300

PART_SUCCESS_STATUS_CODES = {200, 201}

CONFIG_FILE_ENV = "PARTSTREAM_CONFIG"
