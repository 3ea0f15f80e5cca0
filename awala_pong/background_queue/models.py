"""Queued ping jobs."""

import binascii
from base64 import b64decode, b64encode
from typing import Optional
from uuid import uuid4

from marshmallow import EXCLUDE, ValidationError, fields, validate

from ..messaging.models.base import BaseModel, BaseModelSchema


def validate_base64(value: str):
    """Check that `value` is base64-encoded."""
    try:
        b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Value is not base64-encoded") from None


class QueuedPing(BaseModel):
    """A validated parcel waiting to be answered."""

    class Meta:
        """QueuedPing metadata."""

        schema_class = "QueuedPingSchema"

    def __init__(self, *, parcel: str = None, gateway_address: str = None):
        """
        Initialize a queued ping.

        Args:
            parcel: Base64-encoded serialized parcel
            gateway_address: Where the pong must be delivered, if the gateway
                announced it

        """
        super().__init__()
        self.parcel = parcel
        self.gateway_address = gateway_address

    @classmethod
    def from_parcel(
        cls, parcel_serialized: bytes, gateway_address: str = None
    ) -> "QueuedPing":
        """Wrap a serialized parcel."""
        return cls(
            parcel=b64encode(parcel_serialized).decode("ascii"),
            gateway_address=gateway_address,
        )

    @property
    def parcel_serialized(self) -> bytes:
        """Accessor for the parcel octets."""
        return b64decode(self.parcel)


class QueuedPingSchema(BaseModelSchema):
    """QueuedPing schema."""

    class Meta:
        """QueuedPingSchema metadata."""

        model_class = QueuedPing

    parcel = fields.Str(required=True, validate=validate_base64)
    gateway_address = fields.Str(
        required=False, allow_none=True, data_key="gatewayAddress"
    )


class PingJob(BaseModel):
    """A queued ping along with its delivery bookkeeping."""

    class Meta:
        """PingJob metadata."""

        schema_class = "PingJobSchema"

    def __init__(
        self,
        *,
        job_id: str = None,
        attempts: int = 0,
        data: Optional[QueuedPing] = None,
    ):
        """Initialize a job; a random id is assigned when absent."""
        super().__init__()
        self.job_id = job_id or str(uuid4())
        self.attempts = attempts
        self.data = data


class PingJobSchema(BaseModelSchema):
    """PingJob schema."""

    class Meta:
        """PingJobSchema metadata."""

        model_class = PingJob

    job_id = fields.Str(required=True, data_key="id")
    attempts = fields.Int(required=True, validate=validate.Range(min=0))
    data = fields.Nested(QueuedPingSchema, required=True, unknown=EXCLUDE)
