"""Reporting the gate outcome back to the GitHub Actions runner.

Status lines use the runner's workflow command syntax on stdout; step outputs
are appended to the file named by GITHUB_OUTPUT.
"""

import sys
import uuid
from pathlib import Path
from typing import Optional, TextIO

from loguru import logger


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class WorkflowStatus:
    """Caller-facing status channel for the pipeline step."""

    def __init__(self, output_path: Optional[str] = None, stream: Optional[TextIO] = None):
        self.output_path = Path(output_path) if output_path else None
        self.stream = stream or sys.stdout
        self.failed = False

    def set_failed(self, message: str) -> None:
        """Mark the step as failed with an error annotation."""
        self.failed = True
        self.stream.write(f"::error::{_escape_data(message)}\n")
        self.stream.flush()

    def set_output(self, name: str, value: str) -> None:
        if self.output_path is None:
            return
        try:
            with self.output_path.open("a", encoding="utf-8") as f:
                if "\n" in value:
                    delimiter = f"ghadelimiter_{uuid.uuid4()}"
                    f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
                else:
                    f.write(f"{name}={value}\n")
        except OSError as e:
            logger.warning(f"Failed to write step output {name}: {e}")
