from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

import duckdb

from parsers.errors import MultitextError
from parsers.file_loader import DEFAULT_PATTERN, iter_multitext_files, load_multitext


LOGGER = logging.getLogger(__name__)

SectionRow = Tuple[str, str, str, int, str, int, str]

RAW_EXPORTS = {
    "sections": "SELECT * FROM sections ORDER BY source_file, position",
}

ANALYTIC_QUERIES = {
    "key_frequency": """
        SELECT
            section_key,
            COUNT(DISTINCT source_file) AS file_count,
            COUNT(*) AS occurrences,
            SUM(line_count) AS total_lines
        FROM sections
        GROUP BY section_key
        ORDER BY file_count DESC, section_key
    """,
    "file_summary": """
        SELECT
            source_file,
            sha256,
            ANY_VALUE(marker) AS marker,
            COUNT(*) AS section_count,
            SUM(line_count) AS total_lines,
            SUM(CASE WHEN line_count = 0 THEN 1 ELSE 0 END) AS empty_sections
        FROM sections
        GROUP BY source_file, sha256
        ORDER BY source_file
    """,
}


def collect_section_rows(paths: Iterable[Path], encoding: str = "utf-8") -> List[SectionRow]:
    """
    One row per section across the given files.
    Files that fail to decode or parse are logged and skipped.
    """
    rows: List[SectionRow] = []
    for path in paths:
        try:
            loaded = load_multitext(path, encoding=encoding)
        except (MultitextError, UnicodeDecodeError) as exc:
            LOGGER.warning("Skipping %s: %s", path.name, exc)
            continue

        document = loaded.document
        for position, (key, body) in enumerate(document.items(), start=1):
            rows.append(
                (
                    path.name,
                    loaded.sha256,
                    document.marker,
                    position,
                    key,
                    body.count("\n"),
                    body,
                )
            )
    return rows


def _write_parquet(con: duckdb.DuckDBPyConnection, query: str, output_path: Path) -> None:
    if output_path.exists():
        output_path.unlink()
    con.sql(query).write_parquet(str(output_path), compression="zstd")


def _load_sections(con: duckdb.DuckDBPyConnection, rows: List[SectionRow]) -> None:
    con.execute(
        """
        CREATE TABLE sections (
            source_file VARCHAR,
            sha256 VARCHAR,
            marker VARCHAR,
            position INTEGER,
            section_key VARCHAR,
            line_count INTEGER,
            body VARCHAR
        )
        """
    )
    if rows:
        con.executemany("INSERT INTO sections VALUES (?, ?, ?, ?, ?, ?, ?)", rows)


def generate_reports(
    source_dir: Path, output_dir: Path, pattern: str = DEFAULT_PATTERN
) -> Dict[str, Path]:
    """
    Produce Parquet exports describing every section of every multitext file.
    Returns mapping of report name -> file path.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    rows = collect_section_rows(iter_multitext_files(source_dir, pattern))
    LOGGER.info("Collected %d section(s) from %s", len(rows), source_dir)

    report_paths: Dict[str, Path] = {}
    con = duckdb.connect()
    try:
        _load_sections(con, rows)
        for name, query in {**RAW_EXPORTS, **ANALYTIC_QUERIES}.items():
            dest = (output_dir / f"{name}.parquet").resolve()
            LOGGER.info("Writing %s report to %s", name, dest)
            _write_parquet(con, query, dest)
            report_paths[name] = dest
    finally:
        con.close()
    return report_paths
