from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class LaborerRecord:
    """Represents a row from the laborers table; ``data`` is the JSON document."""

    user_id: str
    laborer_id: str
    data: dict[str, Any] = field(default_factory=dict)
    updated_at: datetime | None = None


@dataclass
class PrequalRecord:
    """Represents a row from the prequal table."""

    user_id: str
    data: dict[str, Any] = field(default_factory=dict)
    updated_at: datetime | None = None
