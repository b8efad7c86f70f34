"""Remote resource facade.

This package exposes namespace, tag, and object primitives of the tag
store behind one protocol, with HTTP and in-memory implementations.
"""
