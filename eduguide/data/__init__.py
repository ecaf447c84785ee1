"""Static college catalog."""

from .catalog import CATALOG_PATH, CollegeCatalog

__all__ = ["CATALOG_PATH", "CollegeCatalog"]
