"""Top-level package for Django configuration.

This package exposes configuration for the Touring bookings API. It
contains settings modules for different environments and entry points
for WSGI and ASGI.
"""
