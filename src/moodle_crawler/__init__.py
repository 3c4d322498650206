"""moodle-crawler core library.

This package mirrors the instructional content of a single Moodle course:
it crawls every in-scope page reachable from the course landing page,
keeps only the primary content region of each HTML page, stores other
files verbatim and writes a summary of downloaded vs. external resources.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
