"""Models for repeated sub-entries passed alongside operation options."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DeviceVdomEntry(BaseModel):
    """A device/vdom pair assigned to an ADOM, keyed by serial number or device ID."""

    serial_number: str | None = None
    dev_id: str | None = None
    vdom_name: str | None = None
    vdom_id: str | None = None

    @model_validator(mode="after")
    def validate_identifiers(self) -> DeviceVdomEntry:
        if self.serial_number is None and self.dev_id is None:
            raise ValueError("Device entry needs serial_number or dev_id")
        if self.vdom_name is None and self.vdom_id is None:
            raise ValueError("Device entry needs vdom_name or vdom_id")
        return self


class MetaFieldEntry(BaseModel):
    """ADOM meta field value."""

    name: str = Field(min_length=1)
    value: str


class ObjectRef(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    oid: str | None = None
    name: str | None = None

    @model_validator(mode="after")
    def validate_reference(self) -> ObjectRef:
        if self.oid is None and self.name is None:
            raise ValueError("Reference needs oid or name")
        return self


class DeviceTargetRef(ObjectRef):
    vdom: ObjectRef | None = None


class InstallTarget(BaseModel):
    """Policy package install target: a device (optionally a vdom) or a device group."""

    dev: DeviceTargetRef | None = None
    grp: ObjectRef | None = None

    @model_validator(mode="after")
    def validate_kind(self) -> InstallTarget:
        if (self.dev is None) == (self.grp is None):
            raise ValueError("Install target needs exactly one of dev or grp")
        return self


class AdomTarget(BaseModel):
    """ADOM and policy package a global policy is assigned to."""

    name: str = Field(min_length=1)
    pkg: ObjectRef
