"""Read Thrift files from disk and follow their includes."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict

from .thrift_ast import ThriftDocument, ThriftProgram
from .thrift_ast_parser import ThriftLoadError, ThriftParseError, parse_thrift

logger = logging.getLogger(__name__)


class ThriftIncludeError(ThriftLoadError):
    """Raised when an included file cannot be found."""


def parse_thrift_file(file_path: str) -> ThriftDocument:
    """Parse a single .thrift file without following its includes."""
    text = Path(file_path).read_text()
    try:
        return parse_thrift(text)
    except ThriftParseError as e:
        raise ThriftParseError(f"{file_path}: {e}") from e


def load_thrift_program(entry_path: str) -> ThriftProgram:
    """Parse an entry file and every file it includes, transitively.

    Documents are ordered entry first, then includes depth-first in the
    order they are declared. A file included more than once is parsed once.
    """
    entry = os.path.abspath(entry_path)
    documents: Dict[str, ThriftDocument] = {}
    _load(entry, documents)
    return ThriftProgram(entry_path=entry, documents=documents)


def _load(path: str, documents: Dict[str, ThriftDocument]) -> None:
    if path in documents:
        return

    logger.debug("Parsing %s", path)
    document = parse_thrift_file(path)
    documents[path] = document

    base_dir = os.path.dirname(path)
    for include in document.includes:
        included = os.path.abspath(os.path.join(base_dir, include.path))
        if not os.path.isfile(included):
            raise ThriftIncludeError(
                f"{path}: included file '{include.path}' not found (looked for {included})"
            )
        _load(included, documents)
