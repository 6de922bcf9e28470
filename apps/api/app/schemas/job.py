"""Job API schemas."""

from datetime import datetime
from enum import Enum

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# Upper bound for a single billable amount, in rupees.
MAX_AMOUNT = 10_000_000


class JobStatus(str, Enum):
    UNASSIGNED = "unassigned"
    ASSIGNED = "assigned"
    ACCEPTED = "accepted"
    WAITING = "waiting"
    EN_ROUTE = "en_route"
    DOORSTEP = "doorstep"
    QC_BEFORE = "qc_before"
    JOB_STARTED = "job_started"
    QC_AFTER = "qc_after"
    INVOICE = "invoice"
    PAYMENT = "payment"
    COMPLETED = "completed"


class CheckResult(str, Enum):
    OK = "ok"
    NOT_OK = "not_ok"


class PaymentMethod(str, Enum):
    CASH = "cash"
    UPI = "upi"
    CARD = "card"
    QR = "qr"


class _RequestModel(BaseModel):
    """Request bodies accept both camelCase and snake_case keys."""

    model_config = ConfigDict(
        alias_generator=AliasGenerator(validation_alias=to_camel),
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="forbid",
    )


class QCReport(_RequestModel):
    display: CheckResult | None = None
    front_camera: CheckResult | None = None
    back_camera: CheckResult | None = None
    face_id: CheckResult | None = None
    ear_speaker: CheckResult | None = None
    microphone: CheckResult | None = None
    down_speaker: CheckResult | None = None
    vibrator: CheckResult | None = None
    volume_button: CheckResult | None = None
    power_button: CheckResult | None = None
    charging: CheckResult | None = None
    imei: str = ""
    model: str = ""
    comments: str = ""


class JobTimeline(BaseModel):
    """Timestamp at which the job entered each status."""

    unassigned: datetime | None = None
    assigned: datetime | None = None
    accepted: datetime | None = None
    waiting: datetime | None = None
    en_route: datetime | None = None
    doorstep: datetime | None = None
    qc_before: datetime | None = None
    job_started: datetime | None = None
    qc_after: datetime | None = None
    invoice: datetime | None = None
    payment: datetime | None = None
    completed: datetime | None = None

    def entered_at(self, status: JobStatus) -> datetime | None:
        return getattr(self, status.value)


class Financials(BaseModel):
    service_charge: float = 0.0
    parts_cost: float = 0.0
    gst: float = 0.0
    total: float = 0.0


class FinancialsInput(_RequestModel):
    service_charge: float = Field(default=0.0, ge=0, le=MAX_AMOUNT, allow_inf_nan=False)
    parts_cost: float = Field(default=0.0, ge=0, le=MAX_AMOUNT, allow_inf_nan=False)
    # Accepted for compatibility with older clients; always recomputed server-side.
    gst: float | None = None


class CreateJobRequest(_RequestModel):
    customer_name: str = Field(min_length=1)
    customer_phone: str = Field(min_length=1)
    customer_alt_phone: str | None = None
    customer_address: str = Field(min_length=1)
    customer_location: str | None = None
    device_type: str = Field(min_length=1)
    device_issue: str = Field(min_length=1)
    notes: str | None = None
    time_slot: str | None = None
    service_charge: float = Field(default=0.0, ge=0, le=MAX_AMOUNT, allow_inf_nan=False)
    parts_cost: float = Field(default=0.0, ge=0, le=MAX_AMOUNT, allow_inf_nan=False)
    gst: float | None = None


class TransitionRequest(_RequestModel):
    status: JobStatus
    qc_data: QCReport | None = None
    payment_method: PaymentMethod | None = None
    financials: FinancialsInput | None = None
    technician_id: str | None = None


class AssignJobRequest(_RequestModel):
    technician_id: str = Field(min_length=1)


class Job(BaseModel):
    id: str
    customer_name: str
    customer_phone: str
    customer_alt_phone: str | None = None
    customer_address: str
    customer_location: str | None = None
    device_type: str
    device_issue: str
    notes: str | None = None
    time_slot: str | None = None
    status: JobStatus
    technician_id: str | None = None
    assigned_by: str | None = None
    timeline: JobTimeline
    qc_before: QCReport | None = None
    qc_after: QCReport | None = None
    financials: Financials
    payment_method: PaymentMethod | None = None
    created_by: str
    created_at: datetime
    updated_at: datetime | None = None
