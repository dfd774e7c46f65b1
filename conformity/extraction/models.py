from dataclasses import dataclass


@dataclass(frozen=True)
class ParameterReading:
    """One measured parameter as written in the report."""

    parameter_name: str
    result_text: str
    unit_text: str = ""
    method_text: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "parameter_name": self.parameter_name,
            "result_text": self.result_text,
            "unit_text": self.unit_text,
            "method_text": self.method_text,
        }
