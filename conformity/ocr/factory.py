from conformity.config.settings import Settings
from conformity.llm.factory import LlmClientFactory
from conformity.logging.logger import Log
from conformity.ocr.base import BaseOcrExtractor
from conformity.ocr.vision_adapter import VisionOcrAdapter


class OcrExtractorFactory:
    """Creates the image re-extraction capability, when one is configured."""

    @classmethod
    def create(cls, settings: Settings) -> BaseOcrExtractor | None:
        """Return None when OCR is disabled or no vision model is available."""
        if not settings.ocr_enabled:
            return None
        if settings.llm_provider.lower() == "example":
            Log.info("OCR disabled: example LLM provider has no vision model")
            return None
        model = settings.ocr_model_name.strip() or settings.llm_model_name.strip()
        if not model:
            Log.warning("OCR disabled: neither ocr_model_name nor llm_model_name is set")
            return None
        client = LlmClientFactory.create_client(
            settings, timeout_seconds=settings.ocr_timeout_seconds
        )
        return VisionOcrAdapter(
            client=client,
            model=model,
            render_dpi=settings.ocr_render_dpi,
        )
