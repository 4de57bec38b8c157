"""
CLI entry point for rgdesk.

This module serves as the entry point when rgdesk.cli is executed as a module
with `python -m rgdesk.cli`.
"""

from .main import main

if __name__ == "__main__":
    main()
