from dataclasses import asdict, dataclass, field
from enum import Enum


class Confidence(str, Enum):
    """Coarse completeness signal for an extraction, not a probability."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def __str__(self) -> str:
        return self.value


REQUIRED_W9_FIELDS: tuple[str, ...] = (
    "legal_name",
    "address_line1",
    "city",
    "state",
    "zip",
)


def confidence_for(found_required: int) -> Confidence:
    """Map the count of required fields found to a confidence level."""
    if found_required < 3:
        return Confidence.LOW
    if found_required < 5:
        return Confidence.MEDIUM
    return Confidence.HIGH


@dataclass(frozen=True)
class W9Fields:
    """Values located on a W-9; every field is optional."""

    legal_name: str | None = None
    business_name: str | None = None
    tax_classification: str | None = None
    ein: str | None = None
    ssn_last4: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None

    @property
    def found_required(self) -> int:
        return sum(1 for name in REQUIRED_W9_FIELDS if getattr(self, name))

    @property
    def tin_type(self) -> str | None:
        """EIN wins over SSN when both are present."""
        if self.ein:
            return "EIN"
        if self.ssn_last4:
            return "SSN"
        return None

    @property
    def tin_last4(self) -> str | None:
        if self.ein:
            return self.ein.split("-")[1][-4:]
        return self.ssn_last4

    def to_dict(self) -> dict[str, str | None]:
        return asdict(self)


@dataclass(frozen=True)
class ParseResult:
    """Output of the W-9 extractor; confidence is derived from the fields."""

    fields: W9Fields = field(default_factory=W9Fields)

    @property
    def confidence(self) -> Confidence:
        return confidence_for(self.fields.found_required)


@dataclass(frozen=True)
class CoiPolicies:
    """Expiration dates (YYYY-MM-DD) found on a certificate of insurance."""

    workers_compensation: str | None = None
    automobile_liability: str | None = None
    commercial_general_liability: str | None = None

    def dates(self) -> list[str]:
        return [
            value
            for value in (
                self.workers_compensation,
                self.automobile_liability,
                self.commercial_general_liability,
            )
            if value
        ]
