from collections.abc import Sequence
from dataclasses import replace

from app.extraction.models import ParseResult, W9Fields
from app.extraction.w9_rules import EIN, SSN, TAX_CLASSIFICATIONS, W9_RULES, LabelRule

DEFAULT_EIN_CLASSIFICATION = "C-Corporation"


class W9Parser:
    """Best-effort, label-driven W-9 field extractor over raw OCR text.

    High confidence means "probably correct", never "verified".
    """

    def __init__(self, rules: Sequence[LabelRule] = W9_RULES) -> None:
        self._rules = tuple(rules)

    def parse(self, raw_text: str) -> ParseResult:
        lines = tuple(line.strip() for line in raw_text.splitlines() if line.strip())

        values: dict[str, str] = {}
        for rule in self._rules:
            for key, value in rule.apply(lines).items():
                values.setdefault(key, value)

        classification = self._tax_classification(lines)
        if classification:
            values["tax_classification"] = classification

        ein_match = EIN.search(raw_text)
        if ein_match:
            values["ein"] = f"{ein_match.group(1)}-{ein_match.group(2)}"
        ssn_match = SSN.search(raw_text)
        if ssn_match:
            values["ssn_last4"] = ssn_match.group(3)

        fields = W9Fields(**values)
        if fields.ein and not fields.tax_classification:
            # Placeholder the user must confirm.
            fields = replace(fields, tax_classification=DEFAULT_EIN_CLASSIFICATION)
        return ParseResult(fields=fields)

    @staticmethod
    def _tax_classification(lines: Sequence[str]) -> str | None:
        for line in lines:
            for pattern, label in TAX_CLASSIFICATIONS:
                if pattern.search(line):
                    return label
        return None
