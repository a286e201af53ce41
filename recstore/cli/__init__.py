"""
recstore.cli
------------

Command-line entrypoint for the record store demos.

Exposed as the `recstore` console script (recstore.cli.main:main) and runnable
with `python -m recstore.cli`.
"""

from __future__ import annotations

from .main import app, main

__all__ = ["app", "main"]
