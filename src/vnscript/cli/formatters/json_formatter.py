"""JSON output formatter for CLI."""

from __future__ import annotations

import dataclasses
import json
from typing import Any

from vnscript.cli.formatters.base import OutputFormat, OutputFormatter
from vnscript.exceptions import VNScriptError


class JsonFormatter(OutputFormatter[Any]):
    """Generic JSON formatter for CLI output."""

    def format(self, data: Any, format_type: OutputFormat = OutputFormat.JSON) -> str:  # noqa: ARG002
        """Format data as JSON.

        Args:
            data: Data to format
            format_type: Output format type (ignored, always JSON)

        Returns:
            JSON string
        """
        if hasattr(data, "model_dump"):
            # Pydantic models
            return self._dumps(data.model_dump(mode="json", by_alias=True))
        if dataclasses.is_dataclass(data) and not isinstance(data, type):
            return self._dumps(dataclasses.asdict(data))
        if isinstance(data, dict | list | tuple):
            return self._dumps(data)
        return self._dumps({"value": data})

    def format_error_response(self, error: str | Exception, code: int = 1) -> str:
        """Format an error response.

        vnscript errors are reported by their message and hint rather than
        the full multi-line text.

        Args:
            error: Error message or exception
            code: Error code

        Returns:
            JSON string
        """
        response: dict[str, Any] = {"success": False, "code": code}
        if isinstance(error, VNScriptError):
            response["error"] = error.message
            if error.hint:
                response["hint"] = error.hint
            if error.details:
                response["details"] = error.details
        else:
            response["error"] = str(error)
        return self._dumps(response)

    @staticmethod
    def _dumps(data: Any) -> str:
        return json.dumps(data, default=str, indent=2, ensure_ascii=False)
