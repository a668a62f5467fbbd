#!/usr/bin/env python3
"""Ponder - a bridge from the clip register protocol to Home Assistant."""

__version__ = "0.4.2"
VERSION = __version__
