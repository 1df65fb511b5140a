"""
Data Models
===========

Pydantic models for render options and results, themes and diagnostics.
"""
