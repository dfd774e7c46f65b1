from abc import ABC, abstractmethod


class BaseOcrExtractor(ABC):
    """Contract for image-based re-extraction adapters."""

    @abstractmethod
    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        """Re-read every page of the PDF as an image.

        Returns:
            One transcribed text per page, in page order.

        Raises:
            OcrExtractionError: if the pages cannot be rendered or transcribed.
        """
