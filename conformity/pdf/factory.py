from conformity.config.settings import Settings
from conformity.logging.logger import Log
from conformity.pdf.base import BasePdfExtractor
from conformity.pdf.pdfplumber_adapter import PdfPlumberAdapter
from conformity.pdf.pymupdf_adapter import PyMuPdfAdapter

_ENGINES: dict[str, type[BasePdfExtractor]] = {
    "pdfplumber": PdfPlumberAdapter,
    "pymupdf": PyMuPdfAdapter,
}


class PdfExtractorFactory:
    """Resolves the text-layer extraction capability named by pdf_engine."""

    @staticmethod
    def engines() -> list[str]:
        return sorted(_ENGINES)

    @classmethod
    def create(cls, settings: Settings) -> BasePdfExtractor:
        """Raises ValueError for an engine name that is not registered."""
        engine = settings.pdf_engine.strip().lower()
        try:
            extractor_cls = _ENGINES[engine]
        except KeyError:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {cls.engines()}"
            ) from None
        Log.debug(f"Text extraction engine: {engine}")
        return extractor_cls()
