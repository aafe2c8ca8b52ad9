"""Storage backends.

Backends are imported lazily through ``hastebin_core.plugins`` so that a
deployment using one backend never imports the drivers of the others.
"""

from hastebin_core.backends.storage.base import BaseDocumentStore

__all__ = ["BaseDocumentStore"]
