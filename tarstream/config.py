# config.py
# Runtime defaults for tarstream, overridable through environment variables.

import os


def _env_int(name: str, default: int, base: int = 10) -> int:
    """Read an integer from the environment, falling back to default."""
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw.strip(), base)
    except ValueError:
        return default


# =============================================================================
# Configuration
# =============================================================================

# Permission bits written for entries when the caller supplies none.
# Owner and group read, nothing for others.
DEFAULT_PERMISSIONS = _env_int("TARSTREAM_DEFAULT_MODE", 0o440, base=8)

BUFFER_SIZE = _env_int("TARSTREAM_BUFFER_SIZE", 2048)
SKIP_BUFFER_SIZE = 2048

DEFAULT_CHUNK_SIZE = _env_int("TARSTREAM_CHUNK_SIZE", 65536)  # 64KB chunks
DEFAULT_TIMEOUT = _env_int("TARSTREAM_TIMEOUT", 30)

DEFAULT_OUTPUT_DIR = os.environ.get("TARSTREAM_OUTPUT_DIR", "./expanded")

GZIP_LEVEL = _env_int("TARSTREAM_GZIP_LEVEL", 9)
