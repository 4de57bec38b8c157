"""
Command-line interface implementation.

This module provides the ``rgdesk`` command:
- search execution and result output
- history listing and maintenance
- configuration and history location management
- file preview

The CLI is a thin front end over ``rgdesk.core.api.AppContext``.
"""

from .main import cli, main

__all__ = [
    "cli",
    "main",
]
