from collections.abc import Sequence
from pathlib import Path

from conformity.catalog.regulatory_catalog import RegulatoryCatalog
from conformity.classification.classifier import SampleClassifier
from conformity.classification.rule_set import RuleSetSelector
from conformity.classification.strategies import (
    SemanticChoiceStrategy,
    SubstringStrategy,
    SuggestedNameStrategy,
)
from conformity.config.settings import Settings
from conformity.database.models import JobRecord
from conformity.database.repositories.custom_category_repository import (
    CustomCategoryRepository,
)
from conformity.database.repositories.extraction_repository import ExtractionRepository
from conformity.database.repositories.job_repository import JobRepository
from conformity.decision.beverage import BeverageComplianceCheck
from conformity.decision.evaluator import ComplianceEvaluator
from conformity.decision.fallback import SemanticDecisionFallback
from conformity.extraction.extractor import ParameterExtractor
from conformity.llm.factory import LlmClientFactory
from conformity.logging.logger import Log
from conformity.matching.cache import SemanticMatchCache
from conformity.matching.equivalence import SemanticEquivalence
from conformity.matching.matcher import ParameterMatcher
from conformity.ocr.factory import OcrExtractorFactory
from conformity.pdf.factory import PdfExtractorFactory
from conformity.processor.file_loader import FileLoader
from conformity.processor.pipeline import PipelineContext, PipelineStep
from conformity.processor.result_serializer import ResultSerializer
from conformity.processor.steps import (
    ClassifySampleStep,
    EvaluateComplianceStep,
    ExtractParametersStep,
    ExtractTextStep,
    LoadDocumentStep,
    PersistExtractionStep,
    RecoveryStep,
    SelectRuleSetStep,
)
from conformity.recovery.stage import RecoveryStage


class Processor:
    """Runs the pipeline steps for one job in strict order.

    Pipeline: load -> extract -> recover -> classify -> extract parameters ->
    select rule set -> evaluate -> persist. Progress milestones are written
    after the steps that declare one.
    """

    def __init__(self, steps: Sequence[PipelineStep], job_repo: JobRepository) -> None:
        self._steps = list(steps)
        self._job_repo = job_repo

    def process(self, job: JobRecord) -> PipelineContext:
        """Run the full pipeline; exceptions propagate to the job runner."""
        Log.info(f"Processing {job.file_reference} for job {job.id}")
        context = PipelineContext(
            job_id=job.id,
            file_reference=job.file_reference,
            file_name=job.file_name,
            force_recovery=job.force_recovery,
            existing_extraction_id=job.extraction_id,
        )
        for step in self._steps:
            context = step.run(context)
            if step.progress_percent is not None:
                self._job_repo.update_progress(job.id, step.progress_percent)
        return context


def build_processor(
    settings: Settings,
    job_repo: JobRepository,
    *,
    files_root: Path | None = None,
    match_cache: SemanticMatchCache | None = None,
) -> Processor:
    """Build a Processor with all required adapters."""
    classifier = LlmClientFactory.create_classifier(settings)
    catalog = RegulatoryCatalog(Path(settings.regulatory_catalog_path))
    equivalence = SemanticEquivalence(classifier, match_cache or SemanticMatchCache())
    custom_repo = CustomCategoryRepository() if settings.custom_category_fallback else None

    sample_classifier = SampleClassifier(
        classifier=classifier,
        catalog=catalog,
        strategies=[
            SuggestedNameStrategy(),
            SubstringStrategy(),
            SemanticChoiceStrategy(classifier),
        ],
    )
    selector = RuleSetSelector(
        catalog=catalog,
        custom_repo=custom_repo,
        strategies=[SubstringStrategy(), SemanticChoiceStrategy(classifier)],
    )
    evaluator = ComplianceEvaluator(
        matcher=ParameterMatcher(equivalence),
        fallback=SemanticDecisionFallback(classifier),
        beverage_check=BeverageComplianceCheck(classifier),
    )
    recovery_stage = RecoveryStage(
        OcrExtractorFactory.create(settings),
        min_recovered_chars=settings.recovery_min_chars,
    )

    steps: list[PipelineStep] = [
        LoadDocumentStep(FileLoader(files_root or Path(settings.files_root))),
        ExtractTextStep(PdfExtractorFactory.create(settings)),
        RecoveryStep(recovery_stage),
        ClassifySampleStep(sample_classifier),
        ExtractParametersStep(ParameterExtractor(classifier)),
        SelectRuleSetStep(selector),
        EvaluateComplianceStep(evaluator),
        PersistExtractionStep(ExtractionRepository(), ResultSerializer()),
    ]
    return Processor(steps=steps, job_repo=job_repo)
