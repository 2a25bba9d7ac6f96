"""
Catalog module.

Reads assemblies, parts, BOM rows and stock from the data directory into a
snapshot, and owns the stock writer.

NOTE:
Only schemas are imported at package import time. The app services import
each other, importing them here would make that a cycle at package level.
"""

from . import schemas  # noqa: F401
