from .catalog import ProductCatalog

__all__ = ["ProductCatalog"]
