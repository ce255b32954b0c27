"""Reference database — optional silkscreen labels for report text."""

from .models import PinInfo, KeyInfo, ReferenceDatabase, DatabaseError
from .loader import load_database, find_database, parse_database, database_template

__all__ = [
    # Models
    "PinInfo", "KeyInfo", "ReferenceDatabase", "DatabaseError",
    # Loader
    "load_database", "find_database", "parse_database", "database_template",
]
