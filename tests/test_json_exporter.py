from __future__ import annotations

import json

import pytest

from adapters.json_exporter import export_records_json, load_items, parse_items, records_to_payload
from core.domain.models import OutputRecord


def test_parse_array_and_items_wrapper():
    items = parse_items('[{"domain": "a.com"}, {"json": {"domain": "b.com"}}]')
    assert [i.json_ for i in items] == [{"domain": "a.com"}, {"domain": "b.com"}]

    wrapped = parse_items('{"items": [{"email": "x@y.z"}]}')
    assert wrapped[0].json_ == {"email": "x@y.z"}


def test_parse_single_object_and_jsonl():
    assert parse_items('{"resource": "accountInfo"}')[0].json_ == {"resource": "accountInfo"}

    jsonl = '{"email": "a@x.io"}\n\n{"email": "b@x.io"}\n'
    assert [i.json_["email"] for i in parse_items(jsonl)] == ["a@x.io", "b@x.io"]


def test_parse_empty_and_invalid():
    assert parse_items("   ") == []
    with pytest.raises(ValueError):
        parse_items("[1, 2]")


def test_export_keeps_paired_item(tmp_path):
    records = [
        OutputRecord(json={"email": "a@x.io"}, paired_item=0),
        OutputRecord(json={"error": "boom"}, paired_item=1),
    ]
    out = export_records_json(records=records, output_path=tmp_path / "out" / "records.json")

    data = json.loads(out.read_text(encoding="utf-8"))
    assert data == records_to_payload(records)
    assert data[1] == {"json": {"error": "boom"}, "pairedItem": 1}


def test_load_items_from_file(tmp_path):
    path = tmp_path / "items.json"
    path.write_text(json.dumps([{"resource": "accountInfo"}]), encoding="utf-8")
    assert load_items(path)[0].json_ == {"resource": "accountInfo"}


@pytest.mark.parametrize("text", ["5", "null", '"items"'])
def test_parse_scalar_top_level_is_rejected(text):
    with pytest.raises(ValueError):
        parse_items(text)
