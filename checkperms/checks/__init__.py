"""
Permission policy for checkperms.

Modules:
  base.py   — data model: modes, entry kinds, findings, audit results.
  magic.py  — content sniffer for spurious executable bits.
  policy.py — per-entry-kind rule set producing findings and fixed modes.
"""
