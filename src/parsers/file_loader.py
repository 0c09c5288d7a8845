from __future__ import annotations

import codecs
import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

from .errors import MultitextError
from .multitext import MultitextDocument, MultitextParser

LOGGER = logging.getLogger(__name__)
DEFAULT_PATTERN = "*.multitext"


@dataclass
class MultitextFile:
    source_path: Path
    raw_bytes: bytes
    document: MultitextDocument

    @property
    def sha256(self) -> str:
        return hashlib.sha256(self.raw_bytes).hexdigest()


def _decode(raw_bytes: bytes, encoding: str) -> str:
    """
    Decode file contents, dropping a UTF-8 byte order mark if present.
    """
    if raw_bytes.startswith(codecs.BOM_UTF8) and codecs.lookup(encoding).name == "utf-8":
        raw_bytes = raw_bytes[len(codecs.BOM_UTF8):]
    return raw_bytes.decode(encoding)


def load_multitext(
    path: Path, encoding: str = "utf-8", duplicates: str = "last"
) -> MultitextFile:
    """
    Read and parse a multitext file. Parse errors carry the file name.
    """
    raw_bytes = path.read_bytes()
    text = _decode(raw_bytes, encoding)

    try:
        document = MultitextParser(duplicates=duplicates).parse_document(text)
    except MultitextError as exc:
        exc.filename = str(path)
        raise

    LOGGER.debug(
        "Loaded %s (marker=%r, %d sections)", path.name, document.marker, len(document)
    )
    return MultitextFile(source_path=path, raw_bytes=raw_bytes, document=document)


def iter_multitext_files(directory: Path, pattern: str = DEFAULT_PATTERN) -> List[Path]:
    """
    Files under the directory (non-recursive) matching the pattern, sorted by name.
    """
    return sorted(path for path in directory.glob(pattern) if path.is_file())
