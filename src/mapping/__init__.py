"""Object graph mapping engine.

This package resolves schema, writes and reads mapped instances, and
synthesizes bulk queries over the remote store facade.
"""
