"""Utility modules."""

from hastebin_core.utils.threads import run_blocking

__all__ = ["run_blocking"]
