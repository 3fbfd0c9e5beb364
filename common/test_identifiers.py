import re

from common.identifiers import (
    _to_base36,
    generate_identifier,
    generate_po_number,
    generate_request_number,
    random_segment,
    sanitize_org_id,
)

IDENTIFIER_RE = re.compile(r"^[A-Z]+-[A-Z0-9]{1,6}-[0-9A-Z]+-[0-9A-F]{4}$")


def test_sanitize_org_id_keeps_last_six_alphanumerics():
    assert sanitize_org_id(42) == "42"
    assert sanitize_org_id("acme-corp-international") == "TIONAL"
    assert sanitize_org_id("a.b") == "AB"


def test_sanitize_org_id_falls_back():
    assert sanitize_org_id(None) == "ORG"
    assert sanitize_org_id("--!!") == "ORG"


def test_base36():
    assert _to_base36(0) == "0"
    assert _to_base36(35) == "Z"
    assert _to_base36(36) == "10"
    assert _to_base36(1295) == "ZZ"


def test_random_segment_is_upper_hex():
    segment = random_segment(4)
    assert len(segment) == 4
    assert re.fullmatch(r"[0-9A-F]{4}", segment)


def test_identifier_shape():
    value = generate_identifier("PR", 7)
    assert IDENTIFIER_RE.match(value)
    assert value.startswith("PR-7-")


def test_prefixes():
    assert generate_request_number(3).startswith("PR-3-")
    assert generate_po_number(3).startswith("PO-3-")


def test_identifiers_differ_between_calls():
    values = {generate_po_number(1) for _ in range(50)}
    assert len(values) > 1
