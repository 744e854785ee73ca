"""
Tests for artifact naming policy.
Contract tests: given {kind, output_dir}, compute exact artifact paths.
"""

import pytest
from pathlib import Path

from reports.path_policy import (
    create_artifact_path,
    ExportKind,
    ARTIFACT_NAMES,
    PathPolicyError
)


class TestArtifactPaths:
    """Tests for artifact path generation."""

    def test_portfolio_csv(self):
        """Test full portfolio export path."""
        paths = create_artifact_path(ExportKind.PORTFOLIO, Path('./exports'))

        assert paths['artifact_path'] == Path('./exports') / 'portfolio_report.csv'
        assert paths['filename'] == 'portfolio_report.csv'
        assert paths['content_type'] == 'text/csv'

    def test_markdown(self):
        """Test Markdown artifact path and type."""
        paths = create_artifact_path(ExportKind.MARKDOWN, Path('/tmp/out'))

        assert paths['artifact_path'] == Path('/tmp/out/portfolio_report.md')
        assert paths['content_type'] == 'text/markdown'

    def test_kind_from_string(self):
        """Test that plain string kinds are accepted."""
        paths = create_artifact_path('holdings', Path('out'))

        assert paths['filename'] == 'holdings.csv'

    def test_names_are_distinct(self):
        """Test that no two kinds share a filename."""
        assert len(set(ARTIFACT_NAMES.values())) == len(ExportKind)

    def test_unknown_kind(self):
        """Test rejection of unknown kinds."""
        with pytest.raises(PathPolicyError, match="Unknown export kind"):
            create_artifact_path('pdf', Path('out'))

    def test_empty_output_dir(self):
        """Test rejection of an empty output directory."""
        with pytest.raises(PathPolicyError, match="cannot be empty"):
            create_artifact_path(ExportKind.TRANSACTIONS, '')
