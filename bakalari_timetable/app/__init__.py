"""
Command line and REST adapters for Bakalari Timetable.
"""
