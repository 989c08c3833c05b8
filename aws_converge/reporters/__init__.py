"""
Reporters
=========

Output formatters for tag plans, sync results and waits.

CLIReporter
    Rich terminal output.
JSONReporter
    JSON documents for scripts and pipelines.
"""

from aws_converge.reporters.cli_reporter import CLIReporter
from aws_converge.reporters.json_reporter import JSONReporter

__all__ = ["CLIReporter", "JSONReporter"]
