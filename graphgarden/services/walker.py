"""Output-directory traversal with include/exclude glob filtering."""

import logging
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, Sequence, Tuple

from graphgarden.errors import PageReadError

logger = logging.getLogger(__name__)


def _glob_match(path: str, pattern: str) -> bool:
    """Match a POSIX relative *path* against *pattern*.

    ``*`` crosses directory separators, and a leading ``**/`` also matches
    files at the top level (``**/*.html`` matches ``index.html``).
    """
    if fnmatchcase(path, pattern):
        return True
    return pattern.startswith("**/") and fnmatchcase(path, pattern[3:])


def is_selected(path: str, include: Sequence[str], exclude: Sequence[str] = ()) -> bool:
    """Return True when *path* matches an include pattern and no exclude pattern."""
    if not any(_glob_match(path, pattern) for pattern in include):
        return False
    return not any(_glob_match(path, pattern) for pattern in exclude)


def iter_pages(
    output_dir: Path,
    include: Sequence[str],
    exclude: Sequence[str] = (),
) -> Iterator[Tuple[str, str]]:
    """Yield ``(relative_path, text)`` for every selected file under *output_dir*.

    Files are visited in sorted path order so builds are deterministic.

    Raises:
        PageReadError: if a selected file cannot be read or decoded.
    """
    output_dir = Path(output_dir)
    if not output_dir.is_dir():
        raise PageReadError(output_dir, "output directory does not exist")
    for file_path in sorted(p for p in output_dir.rglob("*") if p.is_file()):
        relative = file_path.relative_to(output_dir).as_posix()
        if not is_selected(relative, include, exclude):
            logger.debug("Skipping %s", relative)
            continue
        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PageReadError(file_path, str(exc)) from exc
        yield relative, text
