#!/usr/bin/env python3
"""Ponder - exceptions above the codec/frame/transport layer."""

from __future__ import annotations

from ponder_tx.exceptions import (
    EnvelopeInvalid as EnvelopeInvalid,
    FrameInvalid as FrameInvalid,
    PayloadTooLarge as PayloadTooLarge,
    PonderException as PonderException,
    PublishFailed as PublishFailed,
    TransportError as TransportError,
)


class _PonderUpperError(PonderException):
    """A failure in the upper layer (fields, sessions, provisioning)."""


########################################################################################
# Errors when translating between registers and properties


class FieldError(_PonderUpperError):
    """An error occurred when reading/writing a field."""


class UnknownField(FieldError):
    """The tag/property has no entry in the device model's registry."""


class AttachStateMissing(FieldError):
    """A register that must accompany a write has not been received (yet)."""

    HINT = "wait for the appliance to report its state, then retry"


class RegistryInconsistent(FieldError):
    """A device model's field table has duplicate tags/names."""


########################################################################################
# Errors when provisioning appliances


class ProvisioningError(_PonderUpperError):
    """An error occurred when provisioning an appliance."""


class ProvisioningViolation(ProvisioningError):
    """An ack arrived without a deploy, or for an already-provisioned appliance."""


class UnknownDeviceModel(ProvisioningError):
    """The appliance's kind (model) is not in the model registry."""

    HINT = "models are added by registering a DeviceModel"
