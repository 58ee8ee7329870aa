"""Readiness Tracker package.

Organized by feature modules (checkins, absences, summaries, grading, ...)
with a thin Flask controller layer over service/repository layers.
"""
