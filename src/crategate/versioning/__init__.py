"""Version requirement parsing, fuzzy name generation and version selection."""

from .requirement import is_valid_version_req, parse_version_req
from .fuzzy import gen_fuzzy_crate_names
from .selector import read_latest_version

__all__ = [
    "is_valid_version_req",
    "parse_version_req",
    "gen_fuzzy_crate_names",
    "read_latest_version",
]
