"""
Shared Kernel

Building blocks shared across the domain apps: value objects and the API
error envelope.
"""
