from typing import Any, Optional

from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel


class ResignationReportCreate(BaseModel):
    """Schema for the public resignation form.

    Fields are kept as raw strings here; format rules are applied by
    app.services.validation so the first failing rule can be reported.
    """

    identity_id: str = ""
    name_and_code: str = ""
    rank: str = ""
    department: str = ""
    tablet_screenshot_url: str = ""
    inventory_screenshot_url: str = ""
    reason: str = ""

    # Address as seen by the browser page. Informational only, the
    # transport address is authoritative.
    client_address: Optional[str] = None

    @field_validator(
        "identity_id",
        "name_and_code",
        "rank",
        "department",
        "tablet_screenshot_url",
        "inventory_screenshot_url",
        "reason",
        mode="before",
    )
    @classmethod
    def coerce_to_string(cls, v: Any) -> Any:
        """Accept JSON numbers for numeric fields (e.g. rank: 5)."""
        if v is None:
            return ""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class SubmissionResponse(BaseModel):
    success: bool
    message: str


class IdentityCheckRequest(BaseModel):
    identity_id: str = ""

    @field_validator("identity_id", mode="before")
    @classmethod
    def coerce_to_string(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class IdentityCheckResponse(BaseModel):
    valid: bool
    exists: bool
    message: str


class ClientAddressResponse(BaseModel):
    address: str


class HealthResponse(BaseModel):
    status: str
    webhook_configured: bool

    class Config:
        alias_generator = to_camel
        populate_by_name = True
