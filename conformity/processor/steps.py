from conformity.classification.classifier import SampleClassifier
from conformity.classification.rule_set import RuleSetSelector
from conformity.database.repositories.extraction_repository import ExtractionRepository
from conformity.decision.evaluator import ComplianceEvaluator
from conformity.extraction.extractor import ParameterExtractor
from conformity.logging.logger import Log
from conformity.pdf.base import BasePdfExtractor
from conformity.processor.file_loader import FileLoader
from conformity.processor.pipeline import PipelineContext, PipelineStep
from conformity.processor.result_serializer import ResultSerializer
from conformity.recovery.stage import RecoveryStage


class LoadDocumentStep(PipelineStep):
    def __init__(self, file_loader: FileLoader) -> None:
        self._file_loader = file_loader

    def run(self, context: PipelineContext) -> PipelineContext:
        context.raw_bytes = self._file_loader.load(context.file_reference)
        Log.info(f"Loaded {len(context.raw_bytes)} bytes for job {context.job_id}")
        return context


class ExtractTextStep(PipelineStep):
    def __init__(self, pdf_extractor: BasePdfExtractor) -> None:
        self._pdf_extractor = pdf_extractor

    def run(self, context: PipelineContext) -> PipelineContext:
        context.fragments = self._pdf_extractor.extract(context.raw_bytes, context.file_name)
        Log.info(f"Extracted {len(context.fragments)} fragments for job {context.job_id}")
        return context


class RecoveryStep(PipelineStep):
    progress_percent = 30

    def __init__(self, recovery_stage: RecoveryStage) -> None:
        self._recovery_stage = recovery_stage

    def run(self, context: PipelineContext) -> PipelineContext:
        outcome = self._recovery_stage.run(
            context.fragments,
            context.raw_bytes,
            force=context.force_recovery,
            source_label=context.file_name,
        )
        context.recovery = outcome
        context.fragments = outcome.fragments
        context.corpus = outcome.corpus
        Log.info(
            f"Effective corpus for job {context.job_id}: {len(outcome.corpus)} chars "
            f"(recovery={outcome.method})"
        )
        return context


class ClassifySampleStep(PipelineStep):
    progress_percent = 50

    def __init__(self, sample_classifier: SampleClassifier) -> None:
        self._sample_classifier = sample_classifier

    def run(self, context: PipelineContext) -> PipelineContext:
        context.profile = self._sample_classifier.classify(context.corpus)
        return context


class ExtractParametersStep(PipelineStep):
    def __init__(self, extractor: ParameterExtractor) -> None:
        self._extractor = extractor

    def run(self, context: PipelineContext) -> PipelineContext:
        context.readings = self._extractor.extract(context.corpus)
        return context


class SelectRuleSetStep(PipelineStep):
    def __init__(self, selector: RuleSetSelector) -> None:
        self._selector = selector

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.profile is None:
            raise ValueError("PipelineContext.profile must be set before rule set selection")
        context.rule_set = self._selector.select(context.profile)
        Log.info(
            f"Rule set for job {context.job_id}: "
            f"{context.rule_set.name if context.rule_set else 'none'}"
        )
        return context


class EvaluateComplianceStep(PipelineStep):
    progress_percent = 80

    def __init__(self, evaluator: ComplianceEvaluator) -> None:
        self._evaluator = evaluator

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.profile is None:
            raise ValueError("PipelineContext.profile must be set before evaluation")
        context.verdicts = self._evaluator.evaluate(
            context.readings,
            context.profile,
            context.rule_set,
            context.corpus,
        )
        return context


class PersistExtractionStep(PipelineStep):
    def __init__(
        self,
        extraction_repo: ExtractionRepository,
        serializer: ResultSerializer,
    ) -> None:
        self._extraction_repo = extraction_repo
        self._serializer = serializer

    def run(self, context: PipelineContext) -> PipelineContext:
        context.extraction_id = self._extraction_repo.save(
            context.existing_extraction_id,
            context.file_name,
            self._serializer.serialize(context),
            success=True,
        )
        Log.info(f"Persisted extraction {context.extraction_id} for job {context.job_id}")
        return context
