"""
Shared settings and logging helpers.
They are imported by the API package and by tests, so they stay free of web framework imports.
"""
