"""
Rendering Module
===============

Email rendering pipeline stages.

Components:
- component_renderer: Render Jinja2 email components to raw markup
- extractor: Locate the MJML fragment in raw markup
- converter: Validate and convert MJML to HTML
- post_processor: Beautify and minify HTML
- plain_text: Plain text rendition of the raw markup
- pipeline: Orchestration of all stages
- templates: MJML component library macros
"""
