"""Test factories for creating test data."""

from tests.factories.connection import ConnectionFactory, RevisionFactory

__all__ = [
    "ConnectionFactory",
    "RevisionFactory",
]
