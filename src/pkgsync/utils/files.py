"""File and path utilities for pkgsync."""

import os
from pathlib import Path


def read_file(path: Path | str, encoding: str = "utf-8") -> str:
    """Read entire file contents as a string.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    return Path(path).read_text(encoding=encoding)


def write_file(path: Path | str, content: str, encoding: str = "utf-8") -> None:
    """Write content to a file, creating parent directories if needed.

    Args:
        path: Path to the file to write.
        content: Content to write to the file.
        encoding: Character encoding to use (default: utf-8).
    """
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(content, encoding=encoding)


def make_absolute(path: Path | str, base_dir: Path) -> Path:
    """Resolve a possibly relative path against a base directory.

    The result is normalized lexically ("." and ".." segments collapsed)
    without touching the filesystem.

    Args:
        path: Relative or absolute path.
        base_dir: Directory relative paths are anchored at.

    Returns:
        The absolute, normalized path.
    """
    candidate = Path(path)
    if not candidate.is_absolute():
        candidate = Path(os.path.abspath(base_dir)) / candidate
    return Path(os.path.normpath(candidate))


def make_relative(path: Path | str, base_dir: Path) -> str:
    """Express a path relative to base_dir when it lies inside it.

    Paths outside base_dir are returned absolute. Separators are always
    forward slashes so that stored paths are platform independent.

    Args:
        path: Relative or absolute path.
        base_dir: Directory to express the path against.

    Returns:
        The canonical string form of the path.
    """
    absolute = make_absolute(path, base_dir)
    base = Path(os.path.abspath(base_dir))
    try:
        return absolute.relative_to(base).as_posix()
    except ValueError:
        return absolute.as_posix()
