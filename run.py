#!/usr/bin/env python3
"""Convenience runner for the trailwalk command-line tool.

Usage:
    python run.py distance --fixes walk.csv
"""
import logging
import sys

from trailwalk.main import main

if __name__ == "__main__":
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    sys.exit(main())
