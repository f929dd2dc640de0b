"""Core domain module for nextstrain_sources.

This module contains the domain models, port definitions and exceptions.
Sources and resources live in the submodules and depend only on the ports.
"""

from nextstrain_sources.core.models import AvailabilityCache, Principal, SourceInfo
from nextstrain_sources.core.ports import Backends, HttpPort, ObjectStorePort, RepositoryPort


__all__ = [
    "AvailabilityCache",
    "Backends",
    "HttpPort",
    "ObjectStorePort",
    "Principal",
    "RepositoryPort",
    "SourceInfo",
]
