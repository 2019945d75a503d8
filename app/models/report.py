from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class Department(str, Enum):
    DEA = "DEA"
    CID = "CID"
    IB = "IB"
    AF = "AF"
    NSB = "NSB"
    HRT = "HRT"
    FA = "FA"
    GS = "GS"
    HRB = "HRB"


DEPARTMENT_CODES = frozenset(d.value for d in Department)


@dataclass(frozen=True)
class ValidatedReport:
    """A resignation report that passed every field rule.

    Only ever built by the validator; consumed by the dispatcher and then
    discarded.
    """

    identity_id: str
    name_and_code: str
    rank: str
    department: Department
    tablet_screenshot_url: str
    inventory_screenshot_url: str
    reason: str
    client_address: str
    reported_address: Optional[str] = None
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
