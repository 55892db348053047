"""ID Generation.

ULID-based identifiers for generation sessions.

- Lexicographically sortable, timestamp-based
- NewType wrappers per ID category
- Type prefixes keep logs readable (app_*, gen_*, req_*)
"""

from datetime import datetime
from typing import NewType
from ulid import ULID

AppID = NewType("AppID", str)
"""Application Model identifier"""

GenerationID = NewType("GenerationID", str)
"""Generation Result identifier"""

RequestID = NewType("RequestID", str)
"""Inbound request identifier"""


class Prefix:
    """ID prefix constants."""

    APP = "app"
    GENERATION = "gen"
    REQUEST = "req"


class Generator:
    """ULID generator."""

    def generate(self) -> str:
        """Generate a new ULID."""
        return str(ULID())

    def generate_with_prefix(self, prefix: str) -> str:
        """Generate ULID with type prefix."""
        return f"{prefix}_{self.generate()}"

    def timestamp(self, id_str: str) -> int:
        """Extract timestamp (milliseconds) from ULID."""
        try:
            ulid_str = id_str.split("_")[1] if "_" in id_str else id_str
            return int(ULID.from_str(ulid_str).timestamp * 1000)
        except (ValueError, IndexError):
            return 0


_generator = Generator()


def new_app_id() -> AppID:
    """Generate new application ID."""
    return AppID(_generator.generate_with_prefix(Prefix.APP))


def new_generation_id() -> GenerationID:
    """Generate new generation ID."""
    return GenerationID(_generator.generate_with_prefix(Prefix.GENERATION))


def new_request_id() -> RequestID:
    """Generate new request ID."""
    return RequestID(_generator.generate_with_prefix(Prefix.REQUEST))


def is_valid(id_str: str) -> bool:
    """Check if string is a valid (optionally prefixed) ULID."""
    try:
        ulid_part = id_str.split("_")[1] if "_" in id_str else id_str
        if len(ulid_part) != 26:
            return False
        ULID.from_str(ulid_part)
        return True
    except (ValueError, IndexError):
        return False


def extract_timestamp(id_str: str) -> datetime | None:
    """Extract creation time from ID, or None if invalid."""
    timestamp_ms = _generator.timestamp(id_str)
    return datetime.fromtimestamp(timestamp_ms / 1000.0) if timestamp_ms > 0 else None


def is_generation_id(id_str: str) -> bool:
    """Check if ID is a generation ID."""
    return id_str.startswith(f"{Prefix.GENERATION}_") and is_valid(id_str)


def is_app_id(id_str: str) -> bool:
    """Check if ID is an application ID."""
    return id_str.startswith(f"{Prefix.APP}_") and is_valid(id_str)
