from typing import Any

from conformity.processor.pipeline import PipelineContext


class ResultSerializer:
    """Converts pipeline output to the JSON document stored in extractions."""

    def serialize(self, context: PipelineContext) -> dict[str, Any]:
        """Build the success payload from the effective (possibly recovered) text."""
        recovery = context.recovery
        rule_set = context.rule_set
        return {
            "file_reference": context.file_reference,
            "text_fragments": [
                {
                    "source_label": fragment.source_label,
                    "ordinal_position": fragment.ordinal_position,
                    "content": fragment.content,
                }
                for fragment in context.fragments
            ],
            "corpus": context.corpus,
            "used_recovery": recovery.used_recovery if recovery else False,
            "recovery_method": recovery.method if recovery else "none",
            "corruption_detected": recovery.corrupted if recovery else False,
            "profile": context.profile.to_dict() if context.profile else None,
            "rule_set": (
                {"id": rule_set.id, "name": rule_set.name, "source": rule_set.source}
                if rule_set
                else None
            ),
            "readings": [reading.to_dict() for reading in context.readings],
            "verdicts": [verdict.to_dict() for verdict in context.verdicts],
        }

    def failure(self, file_reference: str, error_message: str) -> dict[str, Any]:
        """Build the payload recorded when a job fails for good."""
        return {
            "file_reference": file_reference,
            "text_fragments": [],
            "corpus": "",
            "used_recovery": False,
            "recovery_method": "none",
            "corruption_detected": False,
            "profile": None,
            "rule_set": None,
            "readings": [],
            "verdicts": [],
            "error": error_message,
        }
