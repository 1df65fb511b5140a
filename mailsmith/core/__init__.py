"""
Core Business Logic
==================

Core modules for email rendering.

Modules:
- rendering: Component rendering, MJML extraction and conversion, post-processing, plain text
- theme: Theme creation and head style merging
- mjml: Structural MJML validation
- diagnostics: MJML diagnostic translation
- preview: Development preview
"""
