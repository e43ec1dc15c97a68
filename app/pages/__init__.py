# app/pages/__init__.py
"""Server-rendered HTML pages."""
