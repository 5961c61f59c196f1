"""
Terminal rendering for checkperms.

Modules:
  theme.py  — named colours and styles per severity.
  report.py — finding lines and the closing summary.
"""
