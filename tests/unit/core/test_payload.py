"""Unit tests for the payload loader."""

import json
import re

import pytest

from dpcheck.core.exceptions import PayloadNotFoundException, PayloadParseException
from dpcheck.core.payload import PayloadLoader, load_payload

ISO_MILLIS = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")
FIXED = "2026-10-19T08:15:30.123Z"


def fixed_clock():
    return FIXED


def test_injects_timestamp_when_missing(payload_file):
    path = payload_file('{"userId":"u1"}')

    payload = PayloadLoader().load(path)

    assert payload["userId"] == "u1"
    assert ISO_MILLIS.match(payload["timestamp"])


def test_replaces_every_placeholder(payload_file):
    path = payload_file(
        '{"ts":"{{CURRENT_TIMESTAMP}}","nested":{"sentAt":"{{CURRENT_TIMESTAMP}}"}}'
    )

    payload = PayloadLoader(clock=fixed_clock).load(path)

    assert payload["ts"] == FIXED
    assert payload["nested"]["sentAt"] == FIXED
    assert payload["timestamp"] == FIXED
    assert "{{CURRENT_TIMESTAMP}}" not in json.dumps(payload)


def test_existing_timestamp_is_preserved(payload_file):
    path = payload_file('{"userId":"u1","timestamp":"2020-01-01T00:00:00.000Z"}')

    payload = PayloadLoader(clock=fixed_clock).load(path)

    assert payload["timestamp"] == "2020-01-01T00:00:00.000Z"


def test_fixture_on_disk_is_not_modified(payload_file):
    content = '{"ts":"{{CURRENT_TIMESTAMP}}"}'
    path = payload_file(content)

    PayloadLoader().load(path)

    assert path.read_text(encoding="utf-8") == content


def test_each_load_gets_a_fresh_timestamp(payload_file):
    path = payload_file('{"ts":"{{CURRENT_TIMESTAMP}}"}')
    stamps = iter(["2026-01-01T00:00:00.000Z", "2026-01-01T00:00:01.000Z"])
    loader = PayloadLoader(clock=lambda: next(stamps))

    first = loader.load(path)
    second = loader.load(path)

    assert first["ts"] == "2026-01-01T00:00:00.000Z"
    assert second["ts"] == "2026-01-01T00:00:01.000Z"


def test_relative_path_resolves_against_working_directory(tmp_path, monkeypatch):
    (tmp_path / "data").mkdir()
    (tmp_path / "data" / "identify.json").write_text('{"userId":"u1"}', encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    assert load_payload("data/identify.json")["userId"] == "u1"


def test_falls_back_to_path_rerooted_at_root(tmp_path):
    (tmp_path / "fixtures").mkdir()
    (tmp_path / "fixtures" / "p.json").write_text('{"userId":"u2"}', encoding="utf-8")

    payload = PayloadLoader(root=tmp_path).load("/fixtures/p.json")

    assert payload["userId"] == "u2"


def test_missing_everywhere_raises_not_found(tmp_path):
    loader = PayloadLoader(root=tmp_path)

    with pytest.raises(PayloadNotFoundException) as exc_info:
        loader.load("/does/not/exist.json")

    assert len(exc_info.value.candidates) == 2
    assert exc_info.value.candidates[1] == (tmp_path / "does/not/exist.json").resolve()
    assert "not found" in str(exc_info.value)


def test_invalid_json_raises_parse_error_with_path_and_cause(payload_file):
    path = payload_file('{"userId": }', name="broken.json")

    with pytest.raises(PayloadParseException) as exc_info:
        PayloadLoader().load(path)

    error = exc_info.value
    assert error.path == path.resolve()
    assert isinstance(error.cause, json.JSONDecodeError)
    assert "broken.json" in str(error)


def test_undecodable_fixture_raises_parse_error(tmp_path):
    path = tmp_path / "latin1.json"
    path.write_bytes(b'{"userId": "\xff\xfe"}')

    with pytest.raises(PayloadParseException) as exc_info:
        PayloadLoader().load(path)

    assert exc_info.value.path == path.resolve()
    assert isinstance(exc_info.value.cause, UnicodeDecodeError)


def test_non_object_document_is_a_parse_error(payload_file):
    path = payload_file("[1, 2, 3]")

    with pytest.raises(PayloadParseException, match="JSON object"):
        PayloadLoader().load(path)
