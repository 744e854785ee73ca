"""
HTML renderer for report documents.
Produces a self-contained printable page: inline CSS, no external resources.
Every text value is escaped; no content is interpolated as markup.
"""

from html import escape
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


STYLESHEET = """
    body {
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
      max-width: 800px;
      margin: 0 auto;
      padding: 20px;
      color: #333;
      line-height: 1.6;
    }
    .header {
      text-align: center;
      margin-bottom: 40px;
      padding-bottom: 20px;
      border-bottom: 2px solid #f97316;
    }
    .logo { font-size: 24px; font-weight: bold; color: #f97316; margin-bottom: 10px; }
    .subtitle { color: #666; font-size: 14px; }
    .metrics-grid {
      display: grid;
      grid-template-columns: repeat(auto-fit, minmax(200px, 1fr));
      gap: 20px;
      margin-bottom: 30px;
    }
    .metric-card {
      background: #f8f9fa;
      padding: 15px;
      border-radius: 8px;
      border-left: 4px solid #f97316;
    }
    .metric-label { font-size: 12px; color: #666; text-transform: uppercase; margin-bottom: 5px; }
    .metric-value { font-size: 24px; font-weight: bold; color: #333; }
    .insight-card { margin-bottom: 15px; }
    .insight-title { font-weight: bold; margin-bottom: 5px; }
    .insight-description { font-size: 14px; color: #666; }
    .positive { color: #10b981; }
    .negative { color: #ef4444; }
    .section { margin-bottom: 40px; }
    .section-title { font-size: 20px; font-weight: bold; margin-bottom: 20px; color: #333; }
    table { width: 100%; border-collapse: collapse; margin-bottom: 20px; }
    th, td { padding: 12px; text-align: left; border-bottom: 1px solid #ddd; }
    th { background-color: #f8f9fa; font-weight: 600; }
    .text-right { text-align: right; }
    .footer {
      margin-top: 40px;
      padding-top: 20px;
      border-top: 1px solid #ddd;
      text-align: center;
      color: #666;
      font-size: 12px;
    }
    .disclaimer { font-size: 10px; margin-top: 10px; }
    @media print {
      body { margin: 0; }
      .header { page-break-after: avoid; }
      .section { page-break-inside: avoid; }
    }
"""


def render_html(document: Document) -> str:
    """
    Render a report document to a standalone HTML page.

    Args:
        document: Report document

    Returns:
        HTML string; identical documents give identical output
    """
    parts = [
        '<!DOCTYPE html>',
        '<html>',
        '<head>',
        '  <meta charset="utf-8">',
        f'  <title>{escape(document.title)}</title>',
        f'  <style>{STYLESHEET}  </style>',
        '</head>',
        '<body>',
    ]
    parts.extend(_render_header(document))

    for section in document.sections:
        parts.extend(_render_section(section))

    parts.extend(_render_footer(document))
    parts.extend(['</body>', '</html>'])

    return '\n'.join(parts) + '\n'


def _classes(*names: str) -> str:
    return ' '.join(name for name in names if name)


def _tone_class(tone: Tone) -> str:
    return '' if tone == Tone.NEUTRAL else tone.value


def _render_header(document: Document) -> List[str]:
    header = document.header
    return [
        '  <div class="header">',
        f'    <div class="logo">{escape(header.brand)}</div>',
        f'    <h1>{escape(header.title)}</h1>',
        '    <div class="subtitle">',
        f'      Address: {escape(header.address)}<br>',
        f'      Generated: {escape(header.generated)}',
        '    </div>',
        '  </div>',
    ]


def _render_section(section: Section) -> List[str]:
    lines = [
        '  <div class="section">',
        f'    <h2 class="section-title">{escape(section.title)}</h2>',
    ]

    body = section.body
    if isinstance(body, CardGroup):
        lines.extend(_render_cards(body))
    elif isinstance(body, Table):
        lines.extend(_render_table(body))
    elif isinstance(body, InsightList):
        lines.extend(_render_insights(body))
    else:
        raise TypeError(f"Unsupported section body: {type(body).__name__}")

    lines.append('  </div>')
    return lines


def _render_cards(group: CardGroup) -> List[str]:
    lines = ['    <div class="metrics-grid">']
    for card in group.cards:
        value_class = _classes('metric-value', _tone_class(card.tone))
        lines.extend([
            '      <div class="metric-card">',
            f'        <div class="metric-label">{escape(card.label)}</div>',
            f'        <div class="{value_class}">{escape(card.value)}</div>',
            '      </div>',
        ])
    lines.append('    </div>')
    return lines


def _render_table(table: Table) -> List[str]:
    lines = ['    <table>', '      <thead>', '        <tr>']
    for column in table.columns:
        align_class = 'text-right' if column.align == Align.RIGHT else ''
        class_attr = f' class="{align_class}"' if align_class else ''
        lines.append(f'          <th{class_attr}>{escape(column.title)}</th>')
    lines.extend(['        </tr>', '      </thead>', '      <tbody>'])

    for row in table.rows:
        lines.append('        <tr>')
        for column, cell in zip(table.columns, row):
            cell_class = _classes(
                'text-right' if column.align == Align.RIGHT else '',
                _tone_class(cell.tone)
            )
            class_attr = f' class="{cell_class}"' if cell_class else ''
            lines.append(f'          <td{class_attr}>{escape(cell.text)}</td>')
        lines.append('        </tr>')

    lines.extend(['      </tbody>', '    </table>'])
    return lines


def _render_insights(insight_list: InsightList) -> List[str]:
    lines = []
    for insight in insight_list.insights:
        label = f'{insight.insight_type} - Confidence: {insight.confidence}'
        lines.extend([
            '    <div class="metric-card insight-card">',
            f'      <div class="metric-label">{escape(label)}</div>',
            f'      <div class="insight-title">{escape(insight.title)}</div>',
            f'      <div class="insight-description">{escape(insight.description)}</div>',
            '    </div>',
        ])
    return lines


def _render_footer(document: Document) -> List[str]:
    footer = document.footer
    return [
        '  <div class="footer">',
        f'    <p>{escape(footer.attribution)}</p>',
        f'    <p>{escape(footer.generated_line)}</p>',
        f'    <p class="disclaimer">{escape(footer.disclaimer)}</p>',
        '  </div>',
    ]
