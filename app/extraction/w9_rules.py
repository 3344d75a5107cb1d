"""Label-driven rules used by the W-9 extractor.

Each rule owns its label patterns and a strategy that reads the value(s) once
a label line is found. Rules are independent so they can be tested one field
at a time.
"""

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

Extraction = dict[str, str]
Strategy = Callable[[Sequence[str], int], Extraction]

CITY_STATE_ZIP = re.compile(
    r"^([A-Za-z\s]+(?:,\s*)?[A-Za-z\s]*?)\s*,?\s*([A-Z]{2})\s+(\d{5}(?:-\d{4})?)$"
)
CITY_STATE_ZIP_LOOSE = re.compile(r"^(.+?),\s*([A-Z]{2})\s+(\d{5})")
EIN = re.compile(r"\b(\d{2})-(\d{7})\b")
SSN = re.compile(r"\b(\d{3})-(\d{2})-(\d{4})\b")

_INLINE_VALUE = re.compile(r":\s*(.+)")
_NO_LETTERS = re.compile(r"^[\W\d_]+$")

LEGAL_NAME_LABELS = (
    re.compile(r"name\s*\(as\s*shown\s*on\s*your\s*income\s*tax\s*return\)", re.I),
    re.compile(r"name\s*\(as\s*shown\s*on\s*return\)", re.I),
    re.compile(r"legal\s*name", re.I),
)
BUSINESS_NAME_LABELS = (
    re.compile(r"business\s*name", re.I),
    re.compile(r"disregarded\s*entity\s*name", re.I),
    re.compile(r"name\s*of\s*disregarded\s*entity", re.I),
)
ADDRESS_LABELS = (
    re.compile(r"address\s*\(number,\s*street", re.I),
    re.compile(r"address\s*\(number", re.I),
    re.compile(r"mailing\s*address", re.I),
)
CITY_STATE_ZIP_LABELS = (
    re.compile(r"city,\s*state,\s*and\s*zip\s*code", re.I),
    re.compile(r"city,\s*state\s*and\s*zip", re.I),
    re.compile(r"city\s*state\s*zip", re.I),
)

_CHECK_MARK = r"(?:\[\s*[xX✓✔]\s*\]|[☒☑✔✓■]|\bX\b)"
TAX_CLASSIFICATIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(_CHECK_MARK + r"\s*individual\s*/?\s*sole\s*proprietor", re.I), "Individual/Sole Proprietor"),
    (re.compile(_CHECK_MARK + r"\s*c\s*corporation", re.I), "C-Corporation"),
    (re.compile(_CHECK_MARK + r"\s*s\s*corporation", re.I), "S-Corporation"),
    (re.compile(_CHECK_MARK + r"\s*partnership", re.I), "Partnership"),
    (re.compile(_CHECK_MARK + r"\s*trust\s*/?\s*estate", re.I), "Trust/Estate"),
    (re.compile(_CHECK_MARK + r"\s*limited\s*liability\s*company", re.I), "LLC"),
)

ALL_LABELS = LEGAL_NAME_LABELS + BUSINESS_NAME_LABELS + ADDRESS_LABELS + CITY_STATE_ZIP_LABELS


def is_label(line: str) -> bool:
    return any(pattern.search(line) for pattern in ALL_LABELS)


def is_value_line(line: str) -> bool:
    """A candidate value: longer than two chars, has letters, is not a label."""
    return len(line) > 2 and not _NO_LETTERS.match(line) and not is_label(line)


def parse_city_state_zip(line: str) -> Extraction:
    """Parse 'City, ST 12345' with a looser fallback; empty dict when malformed."""
    match = CITY_STATE_ZIP.match(line)
    if match:
        return {
            "city": match.group(1).replace(",", "").strip(),
            "state": match.group(2).upper(),
            "zip": match.group(3),
        }
    loose = CITY_STATE_ZIP_LOOSE.match(line)
    if loose:
        return {
            "city": loose.group(1).strip(),
            "state": loose.group(2).upper(),
            "zip": loose.group(3),
        }
    return {}


def looks_like_city_state_zip(line: str) -> bool:
    return bool(CITY_STATE_ZIP.match(line))


def _inline_value(line: str) -> str | None:
    match = _INLINE_VALUE.search(line)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return None


def _next_value_line(lines: Sequence[str], index: int) -> str | None:
    if index + 1 < len(lines) and is_value_line(lines[index + 1]):
        return lines[index + 1]
    return None


def single_value(field_name: str) -> Strategy:
    """Inline value after a colon, else the next non-trivial line."""

    def extract(lines: Sequence[str], index: int) -> Extraction:
        value = _inline_value(lines[index]) or _next_value_line(lines, index)
        return {field_name: value} if value else {}

    return extract


def address_block(lines: Sequence[str], index: int) -> Extraction:
    """Address line 1, then either address line 2 or the city/state/zip line."""
    line1 = _inline_value(lines[index])
    next_index = index
    if line1 is None:
        line1 = _next_value_line(lines, index)
        next_index = index + 1
    if line1 is None:
        return {}

    found: Extraction = {"address_line1": line1}
    if next_index + 1 < len(lines):
        following = lines[next_index + 1]
        if looks_like_city_state_zip(following):
            found.update(parse_city_state_zip(following))
        elif is_value_line(following):
            found["address_line2"] = following
    return found


def city_state_zip_block(lines: Sequence[str], index: int) -> Extraction:
    inline = _inline_value(lines[index])
    if inline:
        parsed = parse_city_state_zip(inline)
        if parsed:
            return parsed
    if index + 1 < len(lines):
        return parse_city_state_zip(lines[index + 1])
    return {}


@dataclass(frozen=True)
class LabelRule:
    """Scan lines for any label; the first label yielding a value wins."""

    name: str
    labels: tuple[re.Pattern[str], ...]
    strategy: Strategy

    def apply(self, lines: Sequence[str]) -> Extraction:
        for index, line in enumerate(lines):
            if not any(pattern.search(line) for pattern in self.labels):
                continue
            found = self.strategy(lines, index)
            if found:
                return found
        return {}


# City/state/zip runs before the address rule so a labeled city line takes
# precedence over the one inferred from the line after the street address.
W9_RULES: tuple[LabelRule, ...] = (
    LabelRule("legal_name", LEGAL_NAME_LABELS, single_value("legal_name")),
    LabelRule("business_name", BUSINESS_NAME_LABELS, single_value("business_name")),
    LabelRule("city_state_zip", CITY_STATE_ZIP_LABELS, city_state_zip_block),
    LabelRule("address", ADDRESS_LABELS, address_block),
)
