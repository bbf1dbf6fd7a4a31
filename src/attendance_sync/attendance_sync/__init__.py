"""Attendance device synchronization package.

Organized by feature modules (devices, logs, attendance, settings, sync,
scheduler), each split into model / repository protocol / MySQL repository /
service layers and wired together in ``container.py``.
"""
from __future__ import annotations
