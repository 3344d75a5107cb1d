"""Certificate of insurance (COI) expiration date extraction."""

import re
from datetime import date

from app.extraction.models import CoiPolicies

POLICY_PATTERNS: dict[str, tuple[re.Pattern[str], ...]] = {
    "workers_compensation": (
        re.compile(r"workers['\s]*comp(?:ensation)?", re.I),
        re.compile(r"workmen['\s]*comp(?:ensation)?", re.I),
        re.compile(r"\bwc\b", re.I),
    ),
    "automobile_liability": (
        re.compile(r"automobile\s*liability", re.I),
        re.compile(r"auto\s*liability", re.I),
        re.compile(r"vehicle\s*liability", re.I),
        re.compile(r"commercial\s*auto", re.I),
        re.compile(r"business\s*auto", re.I),
    ),
    "commercial_general_liability": (
        re.compile(r"commercial\s*general\s*liability", re.I),
        re.compile(r"general\s*liability", re.I),
        re.compile(r"\bcgl\b", re.I),
        re.compile(r"commercial\s*liability", re.I),
    ),
}

EXPIRATION_KEYWORDS: tuple[re.Pattern[str], ...] = (
    re.compile(r"expires?\s*(?:on|date)?", re.I),
    re.compile(r"expiration\s*(?:date)?", re.I),
    re.compile(r"exp\s*date", re.I),
    re.compile(r"valid\s*until", re.I),
    re.compile(r"valid\s*through", re.I),
    re.compile(r"coverage\s*until", re.I),
)

_MONTHS = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)
_MONTH_DAY_YEAR = re.compile(r"\b(\d{1,2})[/-](\d{1,2})[/-](\d{4})\b")
_YEAR_MONTH_DAY = re.compile(r"\b(\d{4})-(\d{1,2})-(\d{1,2})\b")
_MONTH_NAME = re.compile(r"\b(" + "|".join(_MONTHS) + r")\s+(\d{1,2}),?\s+(\d{4})\b", re.I)

WINDOW_BEFORE = 100
WINDOW_AFTER = 500
DATE_WINDOW = 200


def _iso(year: int, month: int, day: int) -> str | None:
    if year <= 1900 or not 1 <= month <= 12 or not 1 <= day <= 31:
        return None
    return f"{year:04d}-{month:02d}-{day:02d}"


def find_dates(text: str) -> list[str]:
    """All recognizable dates in ``text`` as YYYY-MM-DD strings."""
    found: list[str] = []
    for match in _MONTH_DAY_YEAR.finditer(text):
        month, day, year = (int(group) for group in match.groups())
        found.append(_iso(year, month, day) or "")
    for match in _YEAR_MONTH_DAY.finditer(text):
        year, month, day = (int(group) for group in match.groups())
        found.append(_iso(year, month, day) or "")
    for match in _MONTH_NAME.finditer(text):
        month = _MONTHS.index(match.group(1).lower()) + 1
        found.append(_iso(int(match.group(3)), month, int(match.group(2))) or "")
    return [value for value in found if value]


class CoiParser:
    """Locates policy types on a COI and picks the most likely expiration date."""

    def __init__(self, today: date | None = None) -> None:
        self._today = today

    def parse(self, text: str) -> CoiPolicies:
        return CoiPolicies(
            **{
                policy: self._expiration_for(text, patterns)
                for policy, patterns in POLICY_PATTERNS.items()
            }
        )

    def _expiration_for(self, text: str, patterns: tuple[re.Pattern[str], ...]) -> str | None:
        for pattern in patterns:
            match = pattern.search(text)
            if not match:
                continue
            window = text[max(0, match.start() - WINDOW_BEFORE):match.start() + WINDOW_AFTER]
            keyword_at = self._keyword_offset(window)
            return self._choose(find_dates(window[keyword_at:keyword_at + DATE_WINDOW]))
        return None

    @staticmethod
    def _keyword_offset(window: str) -> int:
        for keyword in EXPIRATION_KEYWORDS:
            match = keyword.search(window)
            if match:
                return match.start()
        return 0

    def _choose(self, dates: list[str]) -> str | None:
        """Latest future date, else the latest date overall."""
        if not dates:
            return None
        today = (self._today or date.today()).isoformat()
        future = sorted(value for value in dates if value > today)
        if future:
            return future[-1]
        return sorted(dates)[-1]
