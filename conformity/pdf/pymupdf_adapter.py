import pymupdf

from conformity.pdf.base import BasePdfExtractor
from conformity.pdf.exceptions import PdfExtractionError
from conformity.pdf.models import TextFragment, fragments_from_pages


class PyMuPdfAdapter(BasePdfExtractor):
    """Extracts text from PDF using PyMuPDF."""

    def extract(self, pdf_bytes: bytes, source_label: str) -> list[TextFragment]:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                pages = [page.get_text() for page in doc]
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf extraction failed: {exc}") from exc
        return fragments_from_pages(pages, source_label)
