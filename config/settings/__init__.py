"""Settings package for the Touring project.

``base.py`` contains configuration shared across environments. ``dev.py``,
``prod.py`` and ``test.py`` extend the base settings with environment
specific overrides.
"""
