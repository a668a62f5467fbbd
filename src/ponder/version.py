#!/usr/bin/env python3
"""Ponder - a bridge from the clip register protocol to Home Assistant."""

from ponder_tx.version import VERSION, __version__  # noqa: F401
