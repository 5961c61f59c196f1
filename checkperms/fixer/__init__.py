"""
Remediation subsystem for checkperms.

Modules:
  executor.py — fix-tier selection and chmod / dry-run application.
"""
