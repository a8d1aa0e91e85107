#!/usr/bin/env python3
"""
Entry point for running the package as a module.
"""
from bakalari_timetable.main import run

if __name__ == "__main__":
    run()
