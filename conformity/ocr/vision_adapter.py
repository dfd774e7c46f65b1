import base64

import pymupdf

from conformity.llm.client_base import BaseLlmClient
from conformity.llm.exceptions import LlmError
from conformity.llm.prompt_loader import load_prompt_template
from conformity.logging.logger import Log
from conformity.ocr.base import BaseOcrExtractor
from conformity.ocr.exceptions import OcrExtractionError


class VisionOcrAdapter(BaseOcrExtractor):
    """Renders pages with PyMuPDF and transcribes them with a vision model."""

    def __init__(
        self,
        *,
        client: BaseLlmClient,
        model: str,
        render_dpi: int = 150,
    ) -> None:
        self._client = client
        self._model = model
        self._render_dpi = render_dpi
        self._prompt = load_prompt_template("ocr_page_prompt.txt")

    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        images = self._render_pages(pdf_bytes)
        texts: list[str] = []
        for index, data_url in enumerate(images, start=1):
            try:
                text = self._client.create_vision_completion(
                    model=self._model,
                    system_prompt="",
                    user_prompt=self._prompt,
                    image_data_url=data_url,
                )
            except LlmError as exc:
                raise OcrExtractionError(f"Vision transcription of page {index} failed: {exc}") from exc
            Log.debug(f"OCR page {index}: {len(text)} chars")
            texts.append(text.strip())
        return texts

    def _render_pages(self, pdf_bytes: bytes) -> list[str]:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                pngs = [
                    page.get_pixmap(dpi=self._render_dpi, alpha=False).tobytes("png")
                    for page in doc
                ]
        except Exception as exc:
            raise OcrExtractionError(f"Failed to render PDF pages: {exc}") from exc
        return [
            f"data:image/png;base64,{base64.b64encode(png).decode('ascii')}" for png in pngs
        ]
