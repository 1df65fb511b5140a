"""
MJML Module
===========

Strict structural validation of MJML documents, used by the converter.
"""
