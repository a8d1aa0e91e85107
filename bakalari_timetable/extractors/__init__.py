#!/usr/bin/env python3
# Extractors package initialization

"""
Extractors package for the Bakalari Timetable application.

This package contains modules for extracting data from portal pages: the
directory of classes, teachers and rooms, and the timetable grid with its
lesson entries.
"""

from bakalari_timetable.extractors.directory import Directory, fetch_directory, parse_directory
from bakalari_timetable.extractors.timetable import parse_timetable, timetable_path
from bakalari_timetable.extractors.lesson_parser import parse_cell, parse_lesson_entry

__all__ = [
    'Directory',
    'fetch_directory',
    'parse_directory',
    'parse_timetable',
    'timetable_path',
    'parse_cell',
    'parse_lesson_entry',
]
