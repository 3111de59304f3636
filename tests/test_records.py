from __future__ import annotations

from pathlib import Path

import pytest

from crate_stats.records import DecodeError, decode_record, iter_records


def test_decode_record_reads_required_fields_and_ignores_extras() -> None:
    line = '{"name":"serde","vers":"1.0.0","deps":[{"name":"serde_derive","req":"^1"}],"features":{"std":[],"derive":["serde_derive"]},"cksum":"x"}'
    rec = decode_record(line, path=Path("index/se/rd/serde"), line_no=1)
    assert rec.name == "serde"
    assert rec.dependencies == ["serde_derive"]
    assert list(rec.features) == ["std", "derive"]
    assert rec.dependency_count == 1
    assert rec.feature_count == 2


@pytest.mark.parametrize(
    "line, fragment",
    [
        ("{not json", "invalid JSON"),
        ("[1, 2]", "expected a JSON object"),
        ('{"deps":[],"features":{}}', "missing field 'name'"),
        ('{"name":"a","features":{}}', "missing field 'deps'"),
        ('{"name":"a","deps":[]}', "missing field 'features'"),
        ('{"name":"","deps":[],"features":{}}', "non-empty string"),
        ('{"name":"a","deps":{},"features":{}}', "'deps' must be a list"),
        ('{"name":"a","deps":[{"req":"1"}],"features":{}}', "missing field 'name' in 'deps[0]'"),
        ('{"name":"a","deps":[{"name":3}],"features":{}}', "'deps[0].name' must be a string"),
        ('{"name":"a","deps":[],"features":{"std":"x"}}', "'features.std' must be a list of strings"),
        ('{"name":"a","deps":[],"features":[]}', "'features' must be an object"),
    ],
)
def test_decode_record_rejects_bad_lines(line: str, fragment: str) -> None:
    with pytest.raises(DecodeError) as exc:
        decode_record(line, path=Path("f"), line_no=7)
    assert fragment in exc.value.detail
    assert exc.value.line_no == 7
    assert exc.value.path == Path("f")
    assert "(line 7)" in str(exc.value)


def test_iter_records_skips_bad_lines_and_keeps_going(tmp_path: Path) -> None:
    p = tmp_path / "index"
    p.write_bytes(
        b'{"name":"a","deps":[],"features":{}}\n'
        b"garbage\n"
        b"\n"
        b'{"name":"b","deps":[{"name":"a"}],"features":{}}\n'
        b"\xff\xfe\n"
        b'{"name":"c","deps":[],"features":{}}'
    )
    errors: list[DecodeError] = []
    names = [r.name for r in iter_records(p, on_error=errors.append)]

    assert names == ["a", "b", "c"]
    assert [e.line_no for e in errors] == [2, 5]
    assert all(e.path == p for e in errors)
    assert "invalid UTF-8" in errors[1].detail


def test_iter_records_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        list(iter_records(tmp_path / "nope", on_error=lambda e: None))


def test_deeply_nested_line_is_a_decode_error(tmp_path: Path) -> None:
    depth = 200_000
    nested = '{"name":"x","deps":[],"features":{},"extra":' + "[" * depth + "]" * depth + "}"
    p = tmp_path / "index"
    p.write_text(
        '{"name":"a","deps":[],"features":{}}\n' + nested + '\n{"name":"a","deps":[],"features":{}}\n',
        encoding="utf-8",
    )
    errors: list[DecodeError] = []
    names = [r.name for r in iter_records(p, on_error=errors.append)]

    assert names == ["a", "a"]
    assert [e.line_no for e in errors] == [2]
    assert "invalid JSON" in errors[0].detail
