from dataclasses import dataclass

from conformity.corpus.composer import compose_corpus
from conformity.logging.logger import Log
from conformity.ocr.base import BaseOcrExtractor
from conformity.ocr.exceptions import OcrExtractionError
from conformity.pdf.models import TextFragment, fragments_from_pages
from conformity.recovery.detector import clean_corrupted_text, is_text_corrupted

METHOD_NONE = "none"
METHOD_OCR = "ocr"
METHOD_CLEANUP = "cleanup"


@dataclass(frozen=True)
class RecoveryOutcome:
    """The effective text every later stage must use."""

    fragments: list[TextFragment]
    corpus: str
    used_recovery: bool
    method: str
    corrupted: bool


class RecoveryStage:
    """Detects garbled extraction and swaps in re-extracted or cleaned text."""

    def __init__(
        self,
        ocr_extractor: BaseOcrExtractor | None,
        min_recovered_chars: int = 100,
    ) -> None:
        self._ocr_extractor = ocr_extractor
        self._min_recovered_chars = min_recovered_chars

    def run(
        self,
        fragments: list[TextFragment],
        pdf_bytes: bytes,
        *,
        force: bool = False,
        source_label: str = "document",
    ) -> RecoveryOutcome:
        corpus = compose_corpus(fragments)
        corrupted = is_text_corrupted(corpus)
        if not corrupted and not force:
            return RecoveryOutcome(fragments, corpus, False, METHOD_NONE, False)

        Log.warning(
            f"Recovery triggered for {source_label} "
            f"(corrupted={corrupted}, forced={force})"
        )
        recovered = self._try_ocr(pdf_bytes, source_label)
        if recovered is not None:
            return RecoveryOutcome(
                fragments=recovered,
                corpus=compose_corpus(recovered),
                used_recovery=True,
                method=METHOD_OCR,
                corrupted=corrupted,
            )

        if not corrupted:
            Log.info(f"Keeping original text for {source_label}: not corrupted")
            return RecoveryOutcome(fragments, corpus, False, METHOD_NONE, False)

        cleaned = clean_corrupted_text(corpus)
        Log.info(f"Applied text cleanup for {source_label}: {len(corpus)} -> {len(cleaned)} chars")
        cleaned_fragments = [
            TextFragment(source_label=f"cleanup:{source_label}", ordinal_position=1, content=cleaned)
        ]
        return RecoveryOutcome(
            fragments=cleaned_fragments,
            corpus=cleaned,
            used_recovery=False,
            method=METHOD_CLEANUP,
            corrupted=True,
        )

    def _try_ocr(self, pdf_bytes: bytes, source_label: str) -> list[TextFragment] | None:
        if self._ocr_extractor is None:
            Log.info("No image re-extraction capability configured")
            return None
        try:
            pages = self._ocr_extractor.extract_pages(pdf_bytes)
        except OcrExtractionError as exc:
            Log.warning(f"Image re-extraction failed for {source_label}: {exc}")
            return None

        fragments = fragments_from_pages(pages, f"ocr:{source_label}")
        total_chars = len(compose_corpus(fragments))
        if total_chars < self._min_recovered_chars:
            Log.warning(
                f"Image re-extraction for {source_label} returned {total_chars} chars, "
                f"below {self._min_recovered_chars}"
            )
            return None
        Log.info(f"Image re-extraction for {source_label} recovered {total_chars} chars")
        return fragments
