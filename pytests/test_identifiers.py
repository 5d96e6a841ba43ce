from __future__ import annotations

import uuid

import pytest

from services.errors import InvalidIdentifier
from services.identifiers import parse_geo_id, try_parse_geo_id


def test_parse_geo_id_canonicalizes() -> None:
    raw = uuid.uuid4()
    assert parse_geo_id(str(raw).upper()) == str(raw)
    assert parse_geo_id(f"  {raw}  ") == str(raw)
    assert parse_geo_id(raw.hex) == str(raw)
    assert parse_geo_id(raw) == str(raw)


@pytest.mark.parametrize("value", ["", "abc", "1234", None, "g" * 32])
def test_parse_geo_id_rejects_malformed(value) -> None:
    with pytest.raises(InvalidIdentifier) as exc_info:
        parse_geo_id(value)
    assert exc_info.value.code == "invalid_identifier"


def test_try_parse_geo_id() -> None:
    raw = str(uuid.uuid4())
    assert try_parse_geo_id(raw) == raw
    assert try_parse_geo_id("nope") is None
