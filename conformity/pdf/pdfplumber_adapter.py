import io

import pdfplumber

from conformity.pdf.base import BasePdfExtractor
from conformity.pdf.exceptions import PdfExtractionError
from conformity.pdf.models import TextFragment, fragments_from_pages


class PdfPlumberAdapter(BasePdfExtractor):
    """Extracts text from PDF using pdfplumber."""

    def extract(self, pdf_bytes: bytes, source_label: str) -> list[TextFragment]:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
        except Exception as exc:
            raise PdfExtractionError(f"pdfplumber extraction failed: {exc}") from exc
        return fragments_from_pages(pages, source_label)
