"""
Markdown renderer for report documents.
Pure function - no I/O, just document-to-Markdown rendering.
"""

import re
from typing import List

from reports.document import (
    Align,
    CardGroup,
    Document,
    InsightList,
    Section,
    Table,
    Tone,
)


# Characters with Markdown meaning inside inline text and table cells
_MARKDOWN_SPECIAL = re.compile(r'([\\`*_{}\[\]<>()#+!|~])')

TONE_MARKERS = {
    Tone.POSITIVE: '▲',
    Tone.NEGATIVE: '▼',
    Tone.NEUTRAL: '',
}


def escape_markdown(text: str) -> str:
    """Escape Markdown control characters and flatten newlines."""
    flattened = ' '.join(text.splitlines())
    return _MARKDOWN_SPECIAL.sub(r'\\\1', flattened)


def render_markdown(document: Document) -> str:
    """
    Render a report document to Markdown.

    Signed values carry ▲ (positive) or ▼ (negative) markers in place of colors.

    Args:
        document: Report document

    Returns:
        Formatted Markdown string
    """
    header = document.header
    report_sections = [
        f"""# {escape_markdown(header.title)}

**{escape_markdown(header.brand)}**

**Address:** {escape_markdown(header.address)}
**Generated:** {escape_markdown(header.generated)}

---"""
    ]

    for section in document.sections:
        report_sections.append(_render_section(section))

    footer = document.footer
    report_sections.append(f"""---

{escape_markdown(footer.attribution)}

{escape_markdown(footer.generated_line)}

*{escape_markdown(footer.disclaimer)}*""")

    return '\n\n'.join(report_sections) + '\n'


def _with_marker(text: str, tone: Tone) -> str:
    marker = TONE_MARKERS[tone]
    escaped = escape_markdown(text)
    return f'{marker} {escaped}' if marker else escaped


def _render_section(section: Section) -> str:
    lines = [f'## {escape_markdown(section.title)}', '']

    body = section.body
    if isinstance(body, CardGroup):
        lines.extend(_render_cards(body))
    elif isinstance(body, Table):
        lines.extend(_render_table(body))
    elif isinstance(body, InsightList):
        lines.extend(_render_insights(body))
    else:
        raise TypeError(f"Unsupported section body: {type(body).__name__}")

    return '\n'.join(lines)


def _render_cards(group: CardGroup) -> List[str]:
    lines = ['| Metric | Value |', '|--------|------:|']
    for card in group.cards:
        lines.append(f'| {escape_markdown(card.label)} | {_with_marker(card.value, card.tone)} |')
    return lines


def _render_table(table: Table) -> List[str]:
    if not table.rows:
        return ['*No entries.*']

    header = '| ' + ' | '.join(escape_markdown(c.title) for c in table.columns) + ' |'
    divider = '|' + '|'.join(
        '------:' if c.align == Align.RIGHT else '--------' for c in table.columns
    ) + '|'

    lines = [header, divider]
    for row in table.rows:
        lines.append('| ' + ' | '.join(_with_marker(cell.text, cell.tone) for cell in row) + ' |')
    return lines


def _render_insights(insight_list: InsightList) -> List[str]:
    if not insight_list.insights:
        return ['*No insights available.*']

    lines = []
    for insight in insight_list.insights:
        lines.append(
            f'- **{escape_markdown(insight.title)}** '
            f'({escape_markdown(insight.insight_type)}, confidence {escape_markdown(insight.confidence)}): '
            f'{escape_markdown(insight.description)}'
        )
    return lines
