from __future__ import annotations

from pathlib import Path

import pytest

duckdb = pytest.importorskip("duckdb")

from analytics.reporting import collect_section_rows, generate_reports
from parsers.file_loader import iter_multitext_files
from .sample_data import SAMPLE_FILES, copy_samples


def test_collect_section_rows_skips_broken_files(tmp_path, samples_dir: Path):
    source_dir = copy_samples(tmp_path, samples_dir, include_broken=True)

    rows = collect_section_rows(iter_multitext_files(source_dir))

    assert {row[0] for row in rows} == set(SAMPLE_FILES.values())
    assert len(rows) == 6
    notes = [row for row in rows if row[0] == SAMPLE_FILES["notes"]]
    assert [row[3] for row in notes] == [1, 2, 3]
    assert [row[4] for row in notes] == ["multitext header", "first thing", "second thing"]
    assert [row[5] for row in notes] == [3, 4, 3]
    assert {row[2] for row in notes} == {"###"}


def test_generate_reports(tmp_path, samples_dir: Path):
    source_dir = copy_samples(tmp_path, samples_dir, include_broken=True)
    output_dir = tmp_path / "reports"

    outputs = generate_reports(source_dir, output_dir)

    assert set(outputs) == {"sections", "key_frequency", "file_summary"}
    for path in outputs.values():
        assert path.exists()

    con = duckdb.connect()

    section_count = con.execute(
        "SELECT COUNT(*) FROM read_parquet(?)",
        [str(outputs["sections"])],
    ).fetchone()[0]
    assert section_count == 6

    header_row = con.execute(
        "SELECT file_count, occurrences FROM read_parquet(?) WHERE section_key = 'multitext header'",
        [str(outputs["key_frequency"])],
    ).fetchone()
    assert header_row == (2, 2)

    summary = con.execute(
        "SELECT marker, section_count, total_lines FROM read_parquet(?) WHERE source_file = ?",
        [str(outputs["file_summary"]), SAMPLE_FILES["notes"]],
    ).fetchone()
    assert summary is not None
    marker, section_count, total_lines = summary
    assert marker == "###"
    assert section_count == 3
    assert total_lines == 10

    con.close()


def test_generate_reports_with_no_matches(tmp_path):
    source_dir = tmp_path / "empty"
    source_dir.mkdir()

    outputs = generate_reports(source_dir, tmp_path / "reports")

    con = duckdb.connect()
    count = con.execute(
        "SELECT COUNT(*) FROM read_parquet(?)", [str(outputs["sections"])]
    ).fetchone()[0]
    assert count == 0
    con.close()


def test_undecodable_file_is_skipped(tmp_path, samples_dir: Path):
    source_dir = copy_samples(tmp_path, samples_dir)
    (source_dir / "latin.multitext").write_bytes(b"@@ multitext header\ncaf\xe9\n")

    outputs = generate_reports(source_dir, tmp_path / "reports")

    con = duckdb.connect()
    files = con.execute(
        "SELECT DISTINCT source_file FROM read_parquet(?) ORDER BY source_file",
        [str(outputs["sections"])],
    ).fetchall()
    con.close()
    assert [row[0] for row in files] == sorted(SAMPLE_FILES.values())


def test_output_dir_with_quote(tmp_path, samples_dir: Path):
    source_dir = copy_samples(tmp_path, samples_dir)

    outputs = generate_reports(source_dir, tmp_path / "it's reports")

    assert all(path.exists() for path in outputs.values())
