from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Tuple

from .errors import DuplicateKey, EmptyMarker, NoHeaderFound

HEADER_TOKEN = "multitext header"
DUPLICATE_POLICIES = ("last", "first", "error")


def split_lines(text: str) -> List[str]:
    """
    Split on newlines, dropping a trailing carriage return from each line.
    A final newline does not produce an extra empty line.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _strip_line_ending(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


@dataclass(frozen=True, eq=False)
class MultitextDocument(Mapping):
    """
    Parsed sections in order of appearance, plus the marker that delimits them.
    """

    marker: str
    header_index: int
    sections: Mapping = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "sections", MappingProxyType(dict(self.sections)))

    def __getitem__(self, key: str) -> str:
        return self.sections[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.sections)

    def __len__(self) -> int:
        return len(self.sections)

    @property
    def header_key(self) -> str:
        return next(iter(self.sections))


class MultitextParser:
    """
    Splits a multitext document into named sections.

    The first line containing "multitext header" defines the marker: everything
    before that phrase, right-trimmed. Every later line starting with the marker
    opens a new section keyed by the rest of the line.
    """

    def __init__(self, duplicates: str = "last") -> None:
        if duplicates not in DUPLICATE_POLICIES:
            raise ValueError(
                f"duplicates must be one of {', '.join(DUPLICATE_POLICIES)}, got {duplicates!r}"
            )
        self.duplicates = duplicates

    def locate_header(self, text: str) -> Tuple[str, int]:
        return self._locate_header(split_lines(text))

    def segment(self, text: str, marker: str, header_index: int) -> Dict[str, str]:
        return self._segment(split_lines(text), marker, header_index)

    def parse(self, text: str) -> Dict[str, str]:
        return self.parse_document(text).sections.copy()

    def parse_lines(self, lines: Iterable[str]) -> Dict[str, str]:
        return self._parse(
            [_strip_line_ending(line) for line in lines]
        ).sections.copy()

    def parse_document(self, text: str) -> MultitextDocument:
        return self._parse(split_lines(text))

    def _parse(self, lines: List[str]) -> MultitextDocument:
        marker, header_index = self._locate_header(lines)
        sections = self._segment(lines, marker, header_index)
        return MultitextDocument(
            marker=marker, header_index=header_index, sections=sections
        )

    @staticmethod
    def _locate_header(lines: List[str]) -> Tuple[str, int]:
        for index, line in enumerate(lines):
            position = line.find(HEADER_TOKEN)
            if position < 0:
                continue
            marker = line[:position].rstrip()
            if not marker:
                raise EmptyMarker(
                    f"no marker before {HEADER_TOKEN!r}", line_number=index + 1
                )
            return marker, index
        raise NoHeaderFound(f"missing {HEADER_TOKEN}", line_number=len(lines))

    def _segment(
        self, lines: List[str], marker: str, header_index: int
    ) -> Dict[str, str]:
        if not marker:
            raise ValueError("marker must not be empty")
        if not 0 <= header_index < len(lines) or not lines[header_index].startswith(marker):
            raise ValueError(f"line {header_index + 1} does not start with {marker!r}")

        sections: Dict[str, str] = {}
        key = ""
        key_line = header_index + 1
        body: List[str] = []

        for line_number, line in enumerate(lines[header_index:], start=header_index + 1):
            if line.startswith(marker):
                if line_number > header_index + 1:
                    self._store(sections, key, body, key_line)
                key = line[len(marker):].strip()
                key_line = line_number
                body = []
            else:
                body.append(line)

        self._store(sections, key, body, key_line)
        return sections

    def _store(
        self, sections: Dict[str, str], key: str, body: List[str], line_number: int
    ) -> None:
        if key in sections:
            if self.duplicates == "error":
                raise DuplicateKey(key, line_number=line_number)
            if self.duplicates == "first":
                return
        sections[key] = "".join(f"{line}\n" for line in body)


def parse(text: str, duplicates: str = "last") -> Dict[str, str]:
    return MultitextParser(duplicates=duplicates).parse(text)


def render(sections: Mapping, marker: str) -> str:
    """
    Rebuild document text from sections. The first key must begin with
    "multitext header" so the result parses back to the same sections.
    """
    if not marker or marker != marker.rstrip():
        raise ValueError(f"marker must be non-empty without trailing whitespace: {marker!r}")
    if HEADER_TOKEN in marker:
        raise ValueError(f"marker must not contain {HEADER_TOKEN!r}: {marker!r}")
    keys = list(sections)
    if not keys or not keys[0].startswith(HEADER_TOKEN):
        raise ValueError(f"first section key must start with {HEADER_TOKEN!r}")

    chunks: List[str] = []
    for key, body in sections.items():
        if any(line.startswith(marker) for line in split_lines(body)):
            raise ValueError(f"section {key!r} has a line starting with {marker!r}")
        chunks.append(f"{marker} {key}\n")
        if body and not body.endswith("\n"):
            body += "\n"
        chunks.append(body)
    return "".join(chunks)
