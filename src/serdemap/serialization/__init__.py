"""Serialization layer: the map protocol and its concrete backends.

Backends may import from the domain layer. The domain layer reaches
back into this package only through deferred imports.
"""
