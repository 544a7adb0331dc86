"""Command line interface."""

from psm_monitor.cli.monitor import cli


__all__ = ["cli"]
