"""Workstation setup (single-host provisioning).

Core design goals:
- Distribution-aware package dispatch
- Idempotent installs (ask before reinstalling)
- Best-effort steps, fatal only where the operator or host says stop
- Centralized logging
"""

__all__ = []
