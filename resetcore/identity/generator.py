# SPDX-License-Identifier: AGPL-3.0-or-later
"""Fresh identity values for the editor's telemetry record."""

from __future__ import annotations

import secrets
import uuid
from dataclasses import dataclass
from typing import Dict

MACHINE_ID_KEY = "telemetry.machineId"
MAC_MACHINE_ID_KEY = "telemetry.macMachineId"
DEV_DEVICE_ID_KEY = "telemetry.devDeviceId"
OWNED_KEYS = (MACHINE_ID_KEY, MAC_MACHINE_ID_KEY, DEV_DEVICE_ID_KEY)

_ID_BYTES = 32


@dataclass(frozen=True)
class IdentityTriple:
    machine_id: str
    mac_machine_id: str
    dev_device_id: str

    def as_record_fields(self) -> Dict[str, str]:
        return {
            MACHINE_ID_KEY: self.machine_id,
            MAC_MACHINE_ID_KEY: self.mac_machine_id,
            DEV_DEVICE_ID_KEY: self.dev_device_id,
        }

    def as_dict(self) -> Dict[str, str]:
        return {
            "machineId": self.machine_id,
            "macMachineId": self.mac_machine_id,
            "devDeviceId": self.dev_device_id,
        }


def generate() -> IdentityTriple:
    return IdentityTriple(
        machine_id=secrets.token_hex(_ID_BYTES),
        mac_machine_id=secrets.token_hex(_ID_BYTES),
        dev_device_id=str(uuid.uuid4()),
    )


__all__ = ["IdentityTriple", "OWNED_KEYS", "generate"]
