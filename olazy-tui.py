#!/usr/bin/env python3
"""Thin entrypoint for the olazy-tui dashboard."""

from __future__ import annotations

from olazy_tui.app import main


if __name__ == "__main__":
    raise SystemExit(main())
