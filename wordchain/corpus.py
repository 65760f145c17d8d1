#!/usr/bin/env python3
"""
Corpus Loading
==============
Reads source texts and joins them into one corpus string for training.

Usage:
    from wordchain.corpus import read_corpus
    from wordchain import ChainModel

    text = read_corpus(["posts/alice.txt", "posts/looking-glass.txt"])
    model = ChainModel.from_text(text, prefix_length=2)
"""

import logging
import sys
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from wordchain.settings import get_setting

logger = logging.getLogger(__name__)

STDIN_MARKER = '-'


def split_words(text: str) -> List[str]:
    """Split text into words on any whitespace. Punctuation stays attached."""
    return text.split()


def iter_corpus_files(paths: Iterable, pattern: Optional[str] = None) -> Iterator:
    """
    Expand corpus sources into individual files.

    Directories are replaced by their files matching pattern (sorted, not
    recursive). Other paths, and the stdin marker '-', pass through as-is.
    """
    if pattern is None:
        pattern = get_setting("corpus.pattern", "*.txt")

    for raw in paths:
        if str(raw) == STDIN_MARKER:
            yield STDIN_MARKER
            continue

        path = Path(raw)
        if path.is_dir():
            matches = sorted(p for p in path.glob(pattern) if p.is_file())
            if not matches:
                logger.warning(f"No files matching '{pattern}' in {path}")
            yield from matches
        else:
            yield path


def read_source(source, encoding: str = 'utf-8') -> str:
    """Read one corpus source (a path, or '-' for stdin)."""
    if str(source) == STDIN_MARKER:
        return sys.stdin.read()

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"Corpus file not found: {path}")
    return path.read_text(encoding=encoding)


def read_corpus(paths: Iterable,
                encoding: Optional[str] = None,
                separator: Optional[str] = None,
                pattern: Optional[str] = None) -> str:
    """
    Read and concatenate corpus sources.

    Args:
        paths: Files, directories, or '-' for stdin
        encoding: Text encoding (default from settings)
        separator: Inserted between sources (default from settings)
        pattern: Glob for files inside directories (default from settings)

    Returns:
        Combined corpus text

    Raises:
        FileNotFoundError: If a listed file does not exist
    """
    if encoding is None:
        encoding = get_setting("corpus.encoding", "utf-8")
    if separator is None:
        separator = get_setting("corpus.separator", "\n")

    texts = []
    for source in iter_corpus_files(paths, pattern=pattern):
        text = read_source(source, encoding=encoding)
        logger.debug(f"Read {len(split_words(text))} words from {source}")
        texts.append(text)

    logger.info(f"Loaded corpus from {len(texts)} source(s)")
    return separator.join(texts)
