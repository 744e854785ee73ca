"""
Export driver - sequences calculation, serialization/rendering and delivery.
The only module with side effects: writing artifacts and presenting for print.

State machine per invocation:
    tabular:   IDLE → COMPUTING → SERIALIZED → DELIVERED
    markdown:  IDLE → RENDERING → SERIALIZED → DELIVERED
    narrative: IDLE → RENDERING → PRESENTED → PRINT_REQUESTED → CLOSED
Any step may move to FAILED, which is terminal and reported in the result.
"""

import logging
import time
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, Any, List, Optional

from analysis.guardrails import enforce_input_limits, InputLimitError
from analysis.risk_metrics import calculate_risk_metrics
from portfolio.models import Portfolio
from portfolio.validators import validate_portfolio, ValidationError
from reports.atomic_writer import write_text_atomic, verify_file_integrity, AtomicWriteError
from reports.html_renderer import render_html
from reports.markdown_renderer import render_markdown
from reports.narrative_report import build_portfolio_document
from reports.path_policy import ExportKind, create_artifact_path
from reports.print_surface import PrintSurface, PrintSurfaceError
from reports.tabular_export import serialize_portfolio, serialize_transactions, serialize_holdings
from utils.settings import ExportSettings


logger = logging.getLogger(__name__)


class ExportState(str, Enum):
    """Enumeration of export lifecycle states."""
    IDLE = 'idle'
    COMPUTING = 'computing'
    SERIALIZED = 'serialized'
    DELIVERED = 'delivered'
    RENDERING = 'rendering'
    PRESENTED = 'presented'
    PRINT_REQUESTED = 'print_requested'
    CLOSED = 'closed'
    FAILED = 'failed'


class ExportFailureKind(str, Enum):
    """Why an export failed."""
    ENVIRONMENT = 'environment'  # blocked by permissions, storage or missing print surface
    INPUT = 'input'              # snapshot violates the input contract or size limits
    INTERNAL = 'internal'        # computation or rendering error


class ExportStateError(RuntimeError):
    """Raised on an illegal state transition."""
    pass


_TRANSITIONS = {
    ExportState.IDLE: {ExportState.COMPUTING, ExportState.RENDERING},
    ExportState.COMPUTING: {ExportState.SERIALIZED},
    ExportState.RENDERING: {ExportState.SERIALIZED, ExportState.PRESENTED},
    ExportState.SERIALIZED: {ExportState.DELIVERED},
    ExportState.PRESENTED: {ExportState.PRINT_REQUESTED},
    ExportState.PRINT_REQUESTED: {ExportState.CLOSED},
}

_SERIALIZERS = {
    ExportKind.PORTFOLIO: serialize_portfolio,
    ExportKind.TRANSACTIONS: lambda portfolio: serialize_transactions(portfolio.transactions),
    ExportKind.HOLDINGS: lambda portfolio: serialize_holdings(portfolio.holdings),
}


@dataclass
class ExportResult:
    """Outcome of one export invocation."""
    kind: str
    status: str = 'failed'
    states: List[str] = field(default_factory=list)
    artifact_path: Optional[str] = None
    content_type: Optional[str] = None
    bytes_written: int = 0
    failure_kind: Optional[str] = None
    error_message: Optional[str] = None
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.status == 'completed'

    @property
    def final_state(self) -> str:
        return self.states[-1] if self.states else ExportState.IDLE.value

    def to_dict(self) -> Dict[str, Any]:
        """Convert to plain dictionary."""
        return asdict(self)


class _ExportRun:
    """Tracks the state of a single export invocation."""

    def __init__(self, kind: str):
        self.result = ExportResult(kind=kind, states=[ExportState.IDLE.value])
        self.state = ExportState.IDLE
        self._start = time.time()

    def advance(self, new_state: ExportState) -> None:
        if new_state not in _TRANSITIONS.get(self.state, set()):
            raise ExportStateError(f"Illegal transition {self.state.value} -> {new_state.value}")

        logger.debug("%s export: %s -> %s", self.result.kind, self.state.value, new_state.value)
        self.state = new_state
        self.result.states.append(new_state.value)

    def complete(self) -> ExportResult:
        self.result.status = 'completed'
        self.result.duration_seconds = time.time() - self._start
        logger.info(
            "%s export completed (%s)", self.result.kind,
            self.result.artifact_path or self.state.value
        )
        return self.result

    def fail(self, error: BaseException) -> ExportResult:
        failure_kind = classify_failure(error)

        if self.state != ExportState.FAILED:
            self.state = ExportState.FAILED
            self.result.states.append(ExportState.FAILED.value)

        self.result.status = 'failed'
        self.result.failure_kind = failure_kind.value
        self.result.error_message = failure_message(failure_kind, error, self.result.artifact_path)
        self.result.duration_seconds = time.time() - self._start

        if failure_kind == ExportFailureKind.INTERNAL:
            logger.error("%s export failed: %s", self.result.kind, error, exc_info=error)
        else:
            logger.error("%s export failed: %s", self.result.kind, self.result.error_message)

        return self.result


def classify_failure(error: BaseException) -> ExportFailureKind:
    """
    Map an exception to a failure kind.

    Storage and print-surface problems are environmental; contract
    violations are input problems; everything else is internal.
    """
    if isinstance(error, (PrintSurfaceError, AtomicWriteError, OSError)):
        return ExportFailureKind.ENVIRONMENT

    if isinstance(error, (ValidationError, InputLimitError)):
        return ExportFailureKind.INPUT

    return ExportFailureKind.INTERNAL


def failure_message(kind: ExportFailureKind, error: BaseException, target: Optional[str] = None) -> str:
    """Build an actionable message for the caller."""
    if kind == ExportFailureKind.ENVIRONMENT:
        where = f" Check that {target} is writable." if target else " Check permissions and that a browser is available."
        return f"Export blocked by environment or permissions: {error}.{where}"

    if kind == ExportFailureKind.INPUT:
        return f"Snapshot rejected: {error}. Fix the portfolio data and retry."

    return f"Internal error while building export: {error}. Please report this with the snapshot."


def _resolve_settings(settings: Optional[ExportSettings]) -> ExportSettings:
    return settings if settings is not None else ExportSettings()


def _check_input(portfolio: Portfolio, settings: ExportSettings) -> None:
    validate_portfolio(portfolio)
    enforce_input_limits(
        portfolio,
        max_transactions=settings.max_transactions,
        max_history_points=settings.max_history_points
    )


def export_tabular(
    portfolio: Portfolio,
    kind: ExportKind,
    output_dir: Optional[Path] = None,
    settings: Optional[ExportSettings] = None
) -> ExportResult:
    """
    Serialize a snapshot to CSV and write it as a named artifact.

    Args:
        portfolio: Snapshot to export
        kind: PORTFOLIO, TRANSACTIONS or HOLDINGS
        output_dir: Target directory (defaults to settings.output_dir)
        settings: Export settings (defaults to built-in values)

    Returns:
        ExportResult; status 'failed' with failure_kind and error_message on error
    """
    run = _ExportRun(kind=str(getattr(kind, 'value', kind)))
    settings = _resolve_settings(settings)

    try:
        kind = ExportKind(kind)
        if kind not in _SERIALIZERS:
            raise ValueError(f"{kind.value} is not a tabular export")

        paths = create_artifact_path(kind, output_dir if output_dir is not None else settings.output_dir)
        run.result.artifact_path = str(paths['artifact_path'])
        run.result.content_type = paths['content_type']

        run.advance(ExportState.COMPUTING)
        _check_input(portfolio, settings)
        content = _SERIALIZERS[kind](portfolio)
        run.advance(ExportState.SERIALIZED)

        _deliver(run, content, paths['artifact_path'])

    except Exception as e:
        return run.fail(e)

    return run.complete()


def export_markdown(
    portfolio: Portfolio,
    output_dir: Optional[Path] = None,
    settings: Optional[ExportSettings] = None,
    generated_at: Optional[datetime] = None
) -> ExportResult:
    """
    Render the narrative report as Markdown and write portfolio_report.md.

    Args:
        portfolio: Snapshot to report on
        output_dir: Target directory (defaults to settings.output_dir)
        settings: Export settings (defaults to built-in values)
        generated_at: Generation timestamp (defaults to now)

    Returns:
        ExportResult
    """
    run = _ExportRun(kind=ExportKind.MARKDOWN.value)
    settings = _resolve_settings(settings)

    try:
        paths = create_artifact_path(
            ExportKind.MARKDOWN,
            output_dir if output_dir is not None else settings.output_dir
        )
        run.result.artifact_path = str(paths['artifact_path'])
        run.result.content_type = paths['content_type']

        run.advance(ExportState.RENDERING)
        document = _build_document(portfolio, settings, generated_at)
        content = render_markdown(document)
        run.advance(ExportState.SERIALIZED)

        _deliver(run, content, paths['artifact_path'])

    except Exception as e:
        return run.fail(e)

    return run.complete()


def export_narrative(
    portfolio: Portfolio,
    surface: PrintSurface,
    settings: Optional[ExportSettings] = None,
    generated_at: Optional[datetime] = None,
    load_timeout: float = 10.0
) -> ExportResult:
    """
    Render the printable report and hand it to a print surface.

    The surface is opened, loaded, asked to print once and always closed.
    The driver does not wait for the user to finish with the print dialog.

    Args:
        portfolio: Snapshot to report on
        surface: Print surface to present on
        settings: Export settings (defaults to built-in values)
        generated_at: Generation timestamp (defaults to now)
        load_timeout: Seconds to wait for the surface to finish loading

    Returns:
        ExportResult; a surface that cannot be opened is reported as an
        'environment' failure
    """
    run = _ExportRun(kind='narrative')
    run.result.content_type = 'text/html'
    settings = _resolve_settings(settings)
    opened = False

    try:
        run.advance(ExportState.RENDERING)
        document = _build_document(portfolio, settings, generated_at)
        html = render_html(document)
        run.result.bytes_written = len(html.encode('utf-8'))

        # set before open(): a partial open is still released, close() tolerates it
        opened = True
        surface.open()
        surface.load(html)
        surface.wait_until_loaded(load_timeout)
        run.advance(ExportState.PRESENTED)

        surface.request_print()
        run.advance(ExportState.PRINT_REQUESTED)

        opened = False
        surface.close()
        run.advance(ExportState.CLOSED)

    except Exception as e:
        if opened:
            _close_quietly(surface)
        return run.fail(e)

    return run.complete()


def _deliver(run: _ExportRun, content: str, artifact_path: Path) -> None:
    """Write the artifact, read it back and mark the run DELIVERED."""
    write_result = write_text_atomic(content, artifact_path)

    if not verify_file_integrity(artifact_path, write_result['bytes_written']):
        raise AtomicWriteError(f"Written artifact failed verification: {artifact_path}")

    run.result.bytes_written = write_result['bytes_written']
    run.advance(ExportState.DELIVERED)


def _build_document(portfolio: Portfolio, settings: ExportSettings, generated_at: Optional[datetime]):
    _check_input(portfolio, settings)
    risk_metrics = calculate_risk_metrics(
        portfolio.performance_history,
        risk_free_rate=settings.risk_free_rate,
        periods_per_year=settings.periods_per_year
    )
    return build_portfolio_document(portfolio, risk_metrics, generated_at)


def _close_quietly(surface: PrintSurface) -> None:
    """Release a surface after an earlier failure, which takes precedence."""
    try:
        surface.close()
    except Exception as e:
        logger.warning("Closing print surface after failure also failed: %s", e)
