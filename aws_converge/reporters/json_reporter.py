"""
JSON Reporter Module
====================

Exports tag plans, sync results and wait outcomes as JSON for scripts
and pipelines.

Output Structure
----------------
Every document has a ``metadata`` section and a ``result`` section::

    {
      "metadata": {
        "kind": "sync",
        "generated_at": "2024-01-15T10:30:00"
      },
      "result": {
        "resource_type": "acm_certificate",
        "resource_id": "arn:aws:acm:...",
        "changed": true,
        "delta": {"to_remove": {...}, "to_add": {...}, "changed_keys": [...]}
      }
    }

Example
-------
>>> from aws_converge.reporters import JSONReporter
>>>
>>> print(JSONReporter().to_string(delta))
>>> JSONReporter(output_path="sync.json").report(batch_result)
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from aws_converge.core.base_tagger import SyncResult
from aws_converge.core.poller import PollResult
from aws_converge.core.sync_manager import BatchSyncResult
from aws_converge.core.tags import TagDelta

# Module logger
logger = logging.getLogger(__name__)

Reportable = Union[TagDelta, SyncResult, BatchSyncResult, PollResult]

KINDS = {
    TagDelta: "delta",
    SyncResult: "sync",
    BatchSyncResult: "batch",
    PollResult: "wait",
}


class JSONReporter:
    """
    Reporter for exporting results to JSON.

    Parameters
    ----------
    output_path : str, optional
        Path for the output file. If not provided, a timestamped filename
        in the current directory is generated.
    indent : int, default=2
        JSON indentation level. None for compact output.
    """

    def __init__(
        self,
        output_path: Optional[str] = None,
        indent: Optional[int] = 2,
    ) -> None:
        self.output_path = output_path
        self.indent = indent

    def _get_output_path(self, kind: str) -> Path:
        if self.output_path:
            return Path(self.output_path)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return Path(f"aws_converge_{kind}_{timestamp}.json")

    @staticmethod
    def _kind(result: Reportable) -> str:
        try:
            return KINDS[type(result)]
        except KeyError:
            raise TypeError(f"Cannot report {type(result).__name__} as JSON")

    def to_dict(self, result: Reportable) -> Dict[str, Any]:
        """
        Build the JSON document for a result.

        Raises
        ------
        TypeError
            If the result type is not reportable.
        """
        return {
            "metadata": {
                "kind": self._kind(result),
                "generated_at": datetime.utcnow().isoformat(),
            },
            "result": result.to_dict(),
        }

    def to_string(self, result: Reportable) -> str:
        """Convert a result to a JSON string without writing a file."""
        return json.dumps(self.to_dict(result), indent=self.indent, default=str)

    def report(self, result: Reportable) -> str:
        """
        Write a result to a JSON file.

        Returns
        -------
        str
            Path to the created file.
        """
        output_path = self._get_output_path(self._kind(result))
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(result), f, indent=self.indent, default=str)

        logger.info(f"JSON export complete: {output_path}")
        return str(output_path)

    def __repr__(self) -> str:
        return f"JSONReporter(output_path={self.output_path!r}, indent={self.indent})"
