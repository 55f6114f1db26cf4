"""
ResiLinked - neighborhood gig matching for barangays.

Connects workers and employers within the same barangay: job posting, skill
matching, applications and assignment.
"""

from .jobs import JobService
from .users import UserProfile

try:
    from importlib.metadata import version

    __version__ = version("resilinked")
except Exception:
    __version__ = "0.0.0"

__all__ = ["JobService", "UserProfile"]
