"""
Search engines.

rgdesk does not match text itself; it delegates to an engine implementing
``SearchEngine``. ``RipgrepEngine`` is the default.
"""

from .ripgrep import MAX_RESULTS, RipgrepEngine, SearchEngine

__all__ = [
    "MAX_RESULTS",
    "RipgrepEngine",
    "SearchEngine",
]
