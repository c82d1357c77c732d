"""
Staff Feedback Form

A data-entry application that lets school directors rate instructional staff
and submit structured evaluations to a Supabase table, mirrored to a
spreadsheet for reporting.
"""

__version__ = "1.0.0"
__author__ = "Pedagogical Monitoring Team"
