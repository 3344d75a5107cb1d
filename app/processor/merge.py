"""Pure builders for the record patches written after an extraction.

Both return a dict of top-level fields to merge into the stored document;
neither touches the database.
"""

from datetime import datetime
from typing import Any

from app.extraction.models import CoiPolicies, Confidence, ParseResult
from app.processor.models import OcrStatus

_W9_INFO_FIELDS: dict[str, str] = {
    "legalName": "legal_name",
    "businessName": "business_name",
    "addressLine1": "address_line1",
    "addressLine2": "address_line2",
    "city": "city",
    "state": "state",
    "zip": "zip",
    "taxClassification": "tax_classification",
    "ein": "ein",
}


def _is_blank(value: Any) -> bool:
    return not value or (isinstance(value, str) and not value.strip())


def format_address(result: ParseResult) -> str | None:
    """Single-line address from the extracted parts, or None without line 1."""
    fields = result.fields
    if not fields.address_line1:
        return None
    parts = [fields.address_line1]
    if fields.address_line2:
        parts.append(fields.address_line2)
    if fields.city and fields.state and fields.zip:
        parts.append(f"{fields.city}, {fields.state} {fields.zip}")
    return ", ".join(parts)


def build_w9_update(
    existing: dict[str, Any],
    result: ParseResult,
    file_path: str,
    now: datetime,
) -> dict[str, Any]:
    """Build the laborer patch for a finished W-9 extraction.

    A low-confidence result never overwrites stored values: only the status
    and the review marker change. Otherwise each w9Info field takes the new
    value when one was found and keeps the stored one when not, while
    ``displayName`` and ``address`` are only filled when currently empty.
    """
    timestamp = now.isoformat()
    confidence = result.confidence
    low = confidence is Confidence.LOW
    update: dict[str, Any] = {
        "w9OcrStatus": (OcrStatus.NEEDS_REVIEW if low else OcrStatus.COMPLETE).value,
        "w9OcrUpdatedAt": timestamp,
        "w9SourceFilePath": file_path,
        "updatedAt": timestamp,
    }
    stored_info: dict[str, Any] = existing.get("w9Info") or {}

    if low:
        update["w9Info"] = {
            **stored_info,
            "ocrConfidence": confidence.value,
            "needsReview": True,
            "updatedAt": timestamp,
        }
        return update

    fields = result.fields
    if fields.legal_name and _is_blank(existing.get("displayName")):
        update["displayName"] = fields.legal_name

    address = format_address(result)
    if address and _is_blank(existing.get("address")):
        update["address"] = address

    w9_info: dict[str, Any] = {
        key: getattr(fields, attr) or stored_info.get(key)
        for key, attr in _W9_INFO_FIELDS.items()
    }
    w9_info["tinType"] = fields.tin_type or stored_info.get("tinType")
    w9_info["tinLast4"] = fields.tin_last4 or stored_info.get("tinLast4")
    w9_info["ocrConfidence"] = confidence.value
    w9_info["needsReview"] = False
    w9_info["updatedAt"] = timestamp

    update["w9Info"] = w9_info
    update["w9OcrError"] = None
    return update


def build_coi_update(
    existing: dict[str, Any],
    policies: CoiPolicies,
    user_id: str,
    file_path: str,
    now: datetime,
) -> dict[str, Any]:
    """Build the prequal patch for a scanned certificate of insurance.

    Policy dates the scan missed keep their stored value; ``expiresOn`` is
    the earliest known policy date.
    """
    timestamp = now.isoformat()
    stored_coi: dict[str, Any] = existing.get("coi") or {}
    stored_policies: dict[str, Any] = stored_coi.get("policies") or {}

    merged = {
        "workersCompensation": policies.workers_compensation
        or stored_policies.get("workersCompensation"),
        "automobileLiability": policies.automobile_liability
        or stored_policies.get("automobileLiability"),
        "commercialGeneralLiability": policies.commercial_general_liability
        or stored_policies.get("commercialGeneralLiability"),
    }
    known_dates = sorted(value for value in merged.values() if value)

    coi: dict[str, Any] = {
        **stored_coi,
        "policies": merged,
        "expiresOn": known_dates[0] if known_dates else stored_coi.get("expiresOn"),
        "ocrProcessed": True,
        "ocrProcessedAt": timestamp,
    }
    if file_path.startswith(f"users/{user_id}/prequal/coi/"):
        coi["filePath"] = file_path
        coi["fileName"] = file_path.rsplit("/", 1)[-1]

    return {"coi": coi, "updatedAt": timestamp}
