from abc import ABC, abstractmethod

from conformity.pdf.models import TextFragment


class BasePdfExtractor(ABC):
    """Contract for all PDF text extraction adapters."""

    @abstractmethod
    def extract(self, pdf_bytes: bytes, source_label: str) -> list[TextFragment]:
        """Extract positioned text fragments from PDF bytes.

        Args:
            pdf_bytes: Raw PDF file content.
            source_label: Label identifying the document, e.g. its file name.

        Returns:
            One fragment per page, in document order.

        Raises:
            PdfExtractionError: if extraction fails for any reason.
        """
