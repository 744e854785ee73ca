"""
Report and Export Module

Turns a portfolio snapshot into output artifacts:
- Quoted CSV exports (portfolio, transactions, holdings)
- Structured report document rendered to HTML or Markdown
- Atomic artifact writing and print-surface delivery
"""
