"""
Center check-in QR codes.

A center's code encodes ``paygo-center:<center id>`` verbatim. Phones either
decode the code with the camera and submit the raw string, or (kiosk mode,
demos, devices without a camera) pick the center by hand.
"""

from typing import Optional

from services.errors import InvalidQRCode

QR_PREFIX = "paygo-center:"


def generate(center_id: str) -> str:
    if not center_id:
        raise ValueError("Center ID is required")
    return f"{QR_PREFIX}{center_id}"


def is_valid(payload) -> bool:
    return isinstance(payload, str) and payload.startswith(QR_PREFIX)


def extract_center_id(payload) -> Optional[str]:
    if not payload or not is_valid(payload):
        return None
    return payload[len(QR_PREFIX):]


class Scanner:
    """Turns whatever the client submitted into a QR payload string."""

    name = "base"

    def read(self, submission: dict) -> str:
        raise NotImplementedError

    def scan_center_id(self, submission: dict) -> str:
        payload = self.read(submission or {})
        center_id = extract_center_id(payload)
        if center_id is None:
            raise InvalidQRCode()
        return center_id


class PayloadScanner(Scanner):
    """The device camera already decoded the code; we get the raw string."""

    name = "payload"

    def read(self, submission: dict) -> str:
        return submission.get("payload") or ""


class SimulatedScanner(Scanner):
    """Manual check-in: the user picks the center they are standing in."""

    name = "simulated"

    def read(self, submission: dict) -> str:
        if submission.get("payload"):
            return submission["payload"]
        center_id = submission.get("center_id")
        if not isinstance(center_id, str) or not center_id.strip():
            return ""
        return generate(center_id.strip())


SCANNERS = {
    PayloadScanner.name: PayloadScanner,
    SimulatedScanner.name: SimulatedScanner,
}


def make_scanner(kind: str) -> Scanner:
    try:
        return SCANNERS[kind]()
    except KeyError:
        raise ValueError(f"Unknown QR_SCANNER {kind!r}; expected one of {sorted(SCANNERS)}") from None
