import pytest

from services import qr
from services.errors import InvalidQRCode


@pytest.mark.parametrize("center_id", ["CTR-2023-0001", "a", "id with spaces", "paygo-center:nested"])
def test_extract_returns_what_generate_encoded(center_id):
    assert qr.extract_center_id(qr.generate(center_id)) == center_id


def test_generate_format():
    assert qr.generate("CTR-2023-0001") == "paygo-center:CTR-2023-0001"


def test_generate_requires_center_id():
    with pytest.raises(ValueError):
        qr.generate("")


@pytest.mark.parametrize("payload, valid", [
    ("paygo-center:CTR-1", True),
    ("paygo-center:", True),
    ("PAYGO-CENTER:CTR-1", False),
    ("https://example.com/paygo-center:CTR-1", False),
    ("", False),
    (None, False),
    (42, False),
])
def test_is_valid(payload, valid):
    assert qr.is_valid(payload) is valid


def test_extract_center_id_returns_none_without_prefix():
    assert qr.extract_center_id("center:CTR-1") is None
    assert qr.extract_center_id(None) is None


def test_payload_scanner_reads_raw_payload():
    scanner = qr.make_scanner("payload")
    assert scanner.scan_center_id({"payload": "paygo-center:CTR-2023-0001"}) == "CTR-2023-0001"


def test_payload_scanner_ignores_manual_center_pick():
    scanner = qr.make_scanner("payload")
    with pytest.raises(InvalidQRCode):
        scanner.scan_center_id({"center_id": "CTR-2023-0001"})


def test_simulated_scanner_builds_payload_from_center_pick():
    scanner = qr.make_scanner("simulated")
    assert scanner.scan_center_id({"center_id": "CTR-2023-0002"}) == "CTR-2023-0002"
    assert scanner.scan_center_id({"payload": "paygo-center:CTR-9"}) == "CTR-9"


@pytest.mark.parametrize("center_id", [5, None, "   ", ["CTR-2023-0001"]])
def test_simulated_scanner_rejects_unusable_center_pick(center_id):
    scanner = qr.make_scanner("simulated")
    with pytest.raises(InvalidQRCode):
        scanner.scan_center_id({"center_id": center_id})


def test_scanner_rejects_foreign_codes():
    with pytest.raises(InvalidQRCode):
        qr.make_scanner("payload").scan_center_id({"payload": "https://example.com"})


def test_unknown_scanner_kind():
    with pytest.raises(ValueError):
        qr.make_scanner("laser")
