"""
Localisation support.

Keeps the registry of supported locales, negotiates the active locale for
each request and validates locale input.
"""
