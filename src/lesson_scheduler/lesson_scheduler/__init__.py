"""Lesson Scheduler package.

This package is organized by feature modules (lessons, attendance, hours, ...)
with a thin Flask controller layer over service and repository layers.
"""
