"""Model for the appliance system status."""

from __future__ import annotations

from pydantic import BaseModel


class SystemStatus(BaseModel):
    """Fields returned by getSystemStatus."""

    platform_type: str | None = None
    version: str | None = None
    serial_number: str | None = None
    bios_version: str | None = None
    host_name: str | None = None
    max_num_admin_domains: str | None = None
    max_num_device_group: str | None = None
    admin_domain_conf: str | None = None
    fips_mode: str | None = None
