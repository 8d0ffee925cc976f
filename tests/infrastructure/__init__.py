"""
Shared test infrastructure.

Modules:
- file_utils: writing themes to disk
- check_utils: running checks on in-memory sources, offense helpers
"""

from .check_utils import codes, highlights, run_checks
from .file_utils import write, write_theme

__all__ = ["write", "write_theme", "run_checks", "highlights", "codes"]
