"""
Atomic file writing for fixed documents.

Prevents a half-written .roomodes-fixed file on Ctrl+C, disk full or
permission errors. Uses write-to-temp-then-rename, which is atomic on the
same filesystem. The temp file is removed on every failure path.

Usage:
    from roomodes.core.atomic_write import atomic_write

    atomic_write(Path(".roomodes-fixed"), serialized)
"""

import errno
import os
import tempfile
from pathlib import Path


class AtomicWriteError(Exception):
    """Error during atomic write operation."""
    pass


def atomic_write(file_path: Path, content: str, encoding: str = 'utf-8') -> bool:
    """
    Write file atomically.

    Args:
        file_path: Path to file to write
        content: Content to write
        encoding: Text encoding (default: utf-8)

    Returns:
        True if write succeeded

    Raises:
        AtomicWriteError: If write fails (with descriptive message)
    """
    file_path = Path(file_path)
    temp_path = None

    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory as the target so the rename stays on one filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            prefix=f".tmp_{file_path.name}_",
            dir=file_path.parent,
            suffix=".tmp"
        )
        temp_path = Path(temp_path_str)

        try:
            with os.fdopen(temp_fd, 'w', encoding=encoding) as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            if e.errno == errno.ENOSPC:
                raise AtomicWriteError(
                    f"Disk full: Cannot write to {file_path}. "
                    f"Free up space and try again."
                ) from e
            elif e.errno == errno.EACCES:
                raise AtomicWriteError(
                    f"Permission denied: Cannot write to {file_path}. "
                    f"Check file/directory permissions."
                ) from e
            raise AtomicWriteError(f"Write error for {file_path}: {e}") from e

        # Keep the permissions of a file being replaced
        if file_path.exists():
            try:
                os.chmod(temp_path, file_path.stat().st_mode)
            except OSError:
                pass  # Non-critical, keep default permissions

        os.replace(temp_path, file_path)
        temp_path = None
        return True

    except AtomicWriteError:
        raise

    except OSError as e:
        raise AtomicWriteError(f"Failed to write {file_path}: {e}") from e

    finally:
        if temp_path is not None and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass
