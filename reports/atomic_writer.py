"""
Atomic file writer - ensures no partial writes or corrupted artifacts.
Implements temp-write → fsync → rename pattern for durability.
"""

import os
import tempfile
import time
from pathlib import Path
from typing import Dict, Any, Optional


class AtomicWriteError(Exception):
    """
    Raised when an atomic write fails.

    The underlying OSError (if any) is kept as __cause__ so callers can
    tell permission problems from other failures.
    """
    pass


def write_text_atomic(content: str, output_path: Path, encoding: str = 'utf-8') -> Dict[str, Any]:
    """
    Write text content atomically to prevent partial files.

    Args:
        content: Text to write
        output_path: Final path for the artifact
        encoding: Text encoding

    Returns:
        Dictionary with write results (output_path, bytes_written, duration_seconds)

    Raises:
        AtomicWriteError: If the directory cannot be created or the write fails
    """
    start_time = time.time()
    output_path = Path(output_path)
    data = content.encode(encoding)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise AtomicWriteError(f"Cannot create directory {output_path.parent}: {e}") from e

    temp_path = None
    try:
        # Temp file in same directory so the rename stays on one filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            suffix='.tmp',
            prefix=f'{output_path.stem}_',
            dir=output_path.parent
        )
        temp_path = Path(temp_path_str)

        with os.fdopen(temp_fd, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())  # Force write to disk

        # os.replace overwrites atomically on POSIX and Windows
        os.replace(temp_path, output_path)
        temp_path = None

    except OSError as e:
        raise AtomicWriteError(f"Write to {output_path} failed: {e}") from e

    finally:
        if temp_path is not None and temp_path.exists():
            temp_path.unlink()

    return {
        'status': 'completed',
        'output_path': str(output_path),
        'bytes_written': len(data),
        'duration_seconds': time.time() - start_time
    }


def verify_file_integrity(file_path: Path, expected_size: Optional[int] = None, encoding: str = 'utf-8') -> bool:
    """
    Check that a written artifact is present, complete and decodable.

    Args:
        file_path: Artifact to check
        expected_size: Byte count reported by the write (optional)
        encoding: Encoding the artifact was written with

    Returns:
        True if the artifact can be read back intact
    """
    try:
        data = Path(file_path).read_bytes()
    except OSError:
        return False

    if expected_size is not None and len(data) != expected_size:
        return False

    try:
        data.decode(encoding)
    except UnicodeDecodeError:
        return False

    return True
