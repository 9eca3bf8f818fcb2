#!/usr/bin/env python3
"""Convenience runner for the dataset build.

Usage:
    python run.py
"""
import logging
from linetrace.main import main

if __name__ == "__main__":
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    main()
