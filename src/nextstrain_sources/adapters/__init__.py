"""Adapters implementing the core ports."""

from nextstrain_sources.adapters.backends import create_backends


__all__ = ["create_backends"]
