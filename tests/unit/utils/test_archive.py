"""Tests for zipping the output directory."""

import zipfile

import pytest

from trace_collector.utils.archive import archive_directory


@pytest.mark.asyncio
async def test_archive_contents_are_relative_to_directory(tmp_path):
    source = tmp_path / "lantern-traces"
    (source / "nested").mkdir(parents=True)
    (source / "summary.json").write_text("[]")
    (source / "a-trace.json").write_text('{"traceEvents": []}')
    (source / "nested" / "b-trace.json").write_text("{}")
    output = tmp_path / "dist" / "lantern-traces.zip"

    result = await archive_directory(source, output)

    assert result == output
    with zipfile.ZipFile(output) as zf:
        assert sorted(zf.namelist()) == ["a-trace.json", "nested/b-trace.json", "summary.json"]
        assert zf.read("a-trace.json") == b'{"traceEvents": []}'
        assert zf.getinfo("summary.json").compress_type == zipfile.ZIP_DEFLATED


@pytest.mark.asyncio
async def test_archive_inside_source_is_not_added_to_itself(tmp_path):
    (tmp_path / "trace.json").write_text("{}")

    await archive_directory(tmp_path, tmp_path / "traces.zip")

    with zipfile.ZipFile(tmp_path / "traces.zip") as zf:
        assert zf.namelist() == ["trace.json"]
