"""
Shared Utilities
===============

Common utilities used across the application.

Modules:
- error_reporting: Failure logging and error presentation
"""
