"""
Operations package - presentation and error mapping between CLI and resources.

Keeps CLI commands thin: commands call resources, printers render results,
and run_and_exit turns exceptions into exit codes.
"""
from .mappers import EXIT_CODES, exit_code_for, run_and_exit

__all__ = ["EXIT_CODES", "exit_code_for", "run_and_exit"]
