"""
Diagnostics Module
==================

Translation of MJML validator output into component-named messages.
"""
