class OcrExtractionError(Exception):
    """Raised when image-based re-extraction fails."""
