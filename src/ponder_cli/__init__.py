#!/usr/bin/env python3
"""A CLI for the ponder library."""
