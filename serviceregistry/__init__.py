"""Service registry: versioned connection configuration for a federation.

Connections are federated service entries. Every change to one is kept as
an immutable, numbered Revision carrying its metadata and its allow, block
and disable-consent relations to other connections.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
