class CatalogLoadError(Exception):
    """Raised when a rule catalog cannot be read or parsed."""
