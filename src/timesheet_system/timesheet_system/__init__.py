"""Timesheet System package.

This package is organized by feature modules (clock, time_entries, timesheets, ...)
with a thin Flask controller layer and SOLID service/repository layers.
"""
