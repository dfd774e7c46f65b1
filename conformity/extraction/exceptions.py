class ParameterExtractionError(Exception):
    """Raised when parameter readings cannot be extracted from the corpus."""
