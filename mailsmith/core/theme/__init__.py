"""
Theme Module
============

Theme creation and head style merging.

Components:
- theme: Theme factory and theme file loading
- merger: Precedence merge of defaults, theme and call-site styles
"""
