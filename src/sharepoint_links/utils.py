# -*- coding: utf-8 -*-
"""
Shared utility functions for SharePoint link provisioning.

This module provides console and debug helpers used across multiple modules.
"""

import os
import time


def is_debug_metadata_enabled():
    """
    Check if debug metadata mode is enabled via DEBUG_METADATA environment variable.

    This is for raw Graph API payloads: request bodies, field values and
    permission listings.

    Returns:
        bool: True if debug metadata mode is enabled, False otherwise
    """
    return os.environ.get('DEBUG_METADATA', 'false').lower() == 'true'


def is_debug_enabled():
    """
    Check if general debug mode is enabled via DEBUG environment variable.

    This controls Graph request tracing, pagination details and the
    statistics summary printed after a run. It does not affect the
    per-step progress lines, which are always printed.

    Returns:
        bool: True if general debug mode is enabled, False otherwise
    """
    return os.environ.get('DEBUG', 'false').lower() == 'true'


def begin_step(message):
    """Print the start of a progress line, e.g. ``  . Fetch list (Docs)...``."""
    print(f"  . {message}...", end="", flush=True)


def end_step(status):
    """Finish a progress line started with begin_step()."""
    print(f" {status}")


def elapsed_ms(start):
    """Milliseconds elapsed since a time.perf_counter() reading."""
    return int((time.perf_counter() - start) * 1000)
