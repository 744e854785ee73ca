"""
Artifact naming policy for exports.
Fixed filenames and content types per export kind.
"""

from enum import Enum
from pathlib import Path
from typing import Dict


class PathPolicyError(Exception):
    """Raised when path policy validation fails."""
    pass


class ExportKind(str, Enum):
    """Enumeration of export artifacts."""
    PORTFOLIO = 'portfolio'
    TRANSACTIONS = 'transactions'
    HOLDINGS = 'holdings'
    MARKDOWN = 'markdown'


ARTIFACT_NAMES = {
    ExportKind.PORTFOLIO: 'portfolio_report.csv',
    ExportKind.TRANSACTIONS: 'transactions.csv',
    ExportKind.HOLDINGS: 'holdings.csv',
    ExportKind.MARKDOWN: 'portfolio_report.md',
}

CONTENT_TYPES = {
    ExportKind.PORTFOLIO: 'text/csv',
    ExportKind.TRANSACTIONS: 'text/csv',
    ExportKind.HOLDINGS: 'text/csv',
    ExportKind.MARKDOWN: 'text/markdown',
}


def create_artifact_path(kind: ExportKind, output_dir: Path) -> Dict[str, object]:
    """
    Resolve artifact path and content type for an export.

    Args:
        kind: Export kind
        output_dir: Directory for the artifact

    Returns:
        Dictionary with:
        - artifact_path: Full path of the artifact
        - filename: Artifact file name
        - content_type: MIME type of the artifact

    Raises:
        PathPolicyError: If kind is unknown or output_dir is empty
    """
    try:
        kind = ExportKind(kind)
    except ValueError as e:
        raise PathPolicyError(f"Unknown export kind: {kind}") from e

    if output_dir is None or str(output_dir).strip() == '':
        raise PathPolicyError("Output directory cannot be empty")

    filename = ARTIFACT_NAMES[kind]
    return {
        'artifact_path': Path(output_dir) / filename,
        'filename': filename,
        'content_type': CONTENT_TYPES[kind]
    }
