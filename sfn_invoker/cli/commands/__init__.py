"""CLI command handlers."""

from .run import run_step

__all__ = ['run_step']
