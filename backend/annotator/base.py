"""
Shared utilities for the annotator.

Provides file discovery, safe file reading, PHP comment stripping and
brace-counting helpers used by the schema sources, the class registry
and the annotation writer.
"""

import logging
import os
import re
from typing import List, Optional, Set, Tuple

logger = logging.getLogger(__name__)


SKIP_DIRS = {
    '.git', '.idea', '.vscode', 'node_modules', 'vendor', 'tmp',
    'logs', 'webroot', 'cache', 'coverage', 'build', 'dist',
}


def find_source_files(project_path: str, extensions: List[str],
                      skip_dirs: Set[str] = None) -> List[str]:
    """Walk project_path returning file paths matching extensions.

    Args:
        project_path: Root directory to search.
        extensions: List of file extensions including dot (e.g. ['.php']).
        skip_dirs: Directory names to skip. Defaults to SKIP_DIRS.

    Returns:
        Sorted list of file paths.
    """
    skip = skip_dirs or SKIP_DIRS
    ext_set = set(extensions)
    results = []

    for root, dirs, files in os.walk(project_path):
        dirs[:] = [d for d in dirs if d not in skip]
        for fname in files:
            if any(fname.endswith(ext) for ext in ext_set):
                results.append(os.path.join(root, fname))

    return sorted(results)


def read_file_safe(file_path: str, encoding: str = 'utf-8') -> Optional[str]:
    """Read a file, returning content or None on error.

    Tries utf-8 first, falls back to latin-1 for legacy encoded files.
    """
    for enc in [encoding, 'latin-1']:
        try:
            with open(file_path, 'r', encoding=enc, newline='') as f:
                return f.read()
        except UnicodeDecodeError:
            continue
        except (PermissionError, OSError) as e:
            logger.warning("Cannot read %s: %s", file_path, e)
            return None
        except Exception as e:
            logger.error("Unexpected error reading %s: %s", file_path, e, exc_info=True)
            return None
    return None


def write_file(file_path: str, content: str, encoding: str = 'utf-8') -> None:
    """Write content back, keeping line endings exactly as given."""
    with open(file_path, 'w', encoding=encoding, newline='') as f:
        f.write(content)


# ---------------------------------------------------------------------------
# Comment stripping
# ---------------------------------------------------------------------------

# Comment-only stripping for PHP that preserves string literals, which
# still carry aliases and option values we need to read.
_PHP_COMMENT_ONLY_RE = re.compile(
    r"'(?:\\.|[^'\\])*'"    # single-quoted strings (kept)
    r'|"(?:\\.|[^"\\])*"'   # double-quoted strings (kept)
    r'|//[^\n]*'            # single-line //
    r'|#[^\n]*'             # single-line #
    r'|/\*.*?\*/',          # multi-line /* */ and docblocks
    re.DOTALL,
)

_STRING_STARTERS = frozenset({"'", '"'})


def _replace_comments_keep_strings(match):
    """Replace comments with whitespace but preserve string literals intact."""
    text = match.group(0)
    if text[0] in _STRING_STARTERS:
        return text
    return re.sub(r'[^\n]', ' ', text)


def strip_php_comments(content: str) -> str:
    """Strip PHP comments while preserving string literals.

    Character positions and line count are preserved, so offsets found in
    the stripped text are valid in the original.
    """
    return _PHP_COMMENT_ONLY_RE.sub(_replace_comments_keep_strings, content)


# ---------------------------------------------------------------------------
# Brace-counting utility for class/method body extraction
# ---------------------------------------------------------------------------

def extract_block_body(content: str, start_pos: int,
                       open_char: str = '{', close_char: str = '}') -> Tuple[str, int, int]:
    """Extract the body of a bracket-delimited block starting from start_pos.

    Scans forward from start_pos to find the opening bracket (`{` unless
    open_char says otherwise), then counts brackets to find its match.

    Args:
        content: Full source text (should be comment-stripped).
        start_pos: Position to start scanning from.

    Returns:
        (body_text, body_start, body_end): the text between braces and
        the absolute positions. Returns ('', -1, -1) if no block found.
    """
    depth = 0
    body_start = -1

    for i in range(start_pos, len(content)):
        ch = content[i]
        if ch == open_char:
            if depth == 0:
                body_start = i + 1
            depth += 1
        elif ch == close_char:
            depth -= 1
            if depth == 0:
                return content[body_start:i], body_start, i
    return '', -1, -1


def line_number_at(content: str, pos: int) -> int:
    """Return the 1-based line number for a character position in content."""
    return content[:pos].count('\n') + 1
