"""Catalog schemas."""

from pydantic import BaseModel

from app.schemas.job import JobStatus, PaymentMethod


class Catalog(BaseModel):
    device_types: list[str]
    issue_types: list[str]
    time_slots: list[str]
    payment_methods: list[PaymentMethod]
    statuses: list[JobStatus]
