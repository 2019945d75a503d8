"""Field rules for resignation reports.

Each rule is a pure function that returns the normalized value or raises
FormatError. validate_report applies them in form order and stops at the
first failure, so a report is either fully valid or rejected.
"""
import re
from typing import Optional

from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from ..errors import FormatError
from ..models.report import Department, DEPARTMENT_CODES, ValidatedReport
from ..schemas.report import ResignationReportCreate

IDENTITY_ID_MIN_LENGTH = 17
IDENTITY_ID_MAX_LENGTH = 20

IDENTITY_ID_PATTERN = re.compile(r"[0-9]{%d,%d}" % (IDENTITY_ID_MIN_LENGTH, IDENTITY_ID_MAX_LENGTH))

# "<first name> <last name> | <static id>"; [^\W\d_] is any Unicode letter,
# so Cyrillic names pass as well as Latin ones.
NAME_AND_CODE_PATTERN = re.compile(r"(?:[^\W\d_]|\s)+\s\|\s[0-9]+")

# Signed integers and decimals ("5", "+5", "-1", "5.5", ".5")
RANK_PATTERN = re.compile(r"[+-]?(?:[0-9]*\.)?[0-9]+")

IDENTITY_ID_MESSAGE = "Invalid identity ID format"
NAME_AND_CODE_MESSAGE = "Invalid name and code format"
RANK_MESSAGE = "Rank must be a number"
DEPARTMENT_MESSAGE = "Unknown department. Allowed: " + ", ".join(d.value for d in Department)
URL_MESSAGE = "Invalid URL format"
REASON_MESSAGE = "Reason is required"

_url_adapter = TypeAdapter(AnyHttpUrl)


def validate_identity_id(value: str) -> str:
    if not IDENTITY_ID_PATTERN.fullmatch(value or ""):
        raise FormatError("identityId", IDENTITY_ID_MESSAGE)
    return value


def validate_name_and_code(value: str) -> str:
    if not NAME_AND_CODE_PATTERN.fullmatch(value or ""):
        raise FormatError("nameAndCode", NAME_AND_CODE_MESSAGE)
    return value


def validate_rank(value: str) -> str:
    if not RANK_PATTERN.fullmatch(value or ""):
        raise FormatError("rank", RANK_MESSAGE)
    return value


def validate_department(value: str) -> Department:
    if value not in DEPARTMENT_CODES:
        raise FormatError("department", DEPARTMENT_MESSAGE)
    return Department(value)


def validate_screenshot_url(value: str, field: str = "screenshotUrl") -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise FormatError(field, URL_MESSAGE)
    try:
        url = _url_adapter.validate_python(cleaned)
    except ValidationError:
        raise FormatError(field, URL_MESSAGE)
    if not url.host:
        raise FormatError(field, URL_MESSAGE)
    return cleaned


def validate_reason(value: str) -> str:
    cleaned = (value or "").strip()
    if len(cleaned) < 1:
        raise FormatError("reason", REASON_MESSAGE)
    return cleaned


def validate_report(
    report: ResignationReportCreate,
    client_address: str,
) -> ValidatedReport:
    """Apply every field rule in form order.

    Raises FormatError for the first failing field.
    """
    reported: Optional[str] = (report.client_address or "").strip() or None

    return ValidatedReport(
        identity_id=validate_identity_id(report.identity_id),
        name_and_code=validate_name_and_code(report.name_and_code),
        rank=validate_rank(report.rank),
        department=validate_department(report.department),
        tablet_screenshot_url=validate_screenshot_url(
            report.tablet_screenshot_url, field="tabletScreenshotUrl"
        ),
        inventory_screenshot_url=validate_screenshot_url(
            report.inventory_screenshot_url, field="inventoryScreenshotUrl"
        ),
        reason=validate_reason(report.reason),
        client_address=client_address,
        reported_address=reported,
    )
