"""
Logging, error tracking and text helpers.
"""
