"""
Simple system to debug assignment solvers via log messages
"""

from __future__ import annotations

import functools

from environs import Env

from .constants import ENV_DEBUG

__all__ = ["check_debug_enabled"]


@functools.cache
def check_debug_enabled() -> bool:
    """
    Check whether debugging is enabled by reading the environment
    variable ``UNIASSIGN_DEBUG``.
    """
    return Env().bool(ENV_DEBUG, default=False)
