"""JSON reporter for structured output and GitHub Actions integration.

Writes the RunResult of a completed run to a file and/or to the
GITHUB_OUTPUT file of a workflow step. Nothing is kept between runs.
"""

import json
import os
from pathlib import Path
from typing import Optional

from tracker_harness.models import ResultStatus, SectionResult, StepResult
from tracker_harness.reporters.base import Reporter
from tracker_harness.runner import RunResult


class JsonReporter(Reporter):
    """JSON reporter for structured output.

    Args:
        output_path: Optional file path to write JSON output
        github_output: If True, write to GITHUB_OUTPUT for Actions
    """

    def __init__(
        self,
        output_path: Optional[str] = None,
        github_output: bool = False,
    ):
        self.output_path = output_path
        self.github_output = github_output

    def on_section_start(self, name: str) -> None:
        """No-op for JSON reporter."""
        pass

    def on_request(self, method, endpoint, status, duration_ms) -> None:
        """No-op for JSON reporter."""
        pass

    def on_step_complete(self, section: str, result: StepResult) -> None:
        """No-op - data comes from the run result."""
        pass

    def on_section_complete(self, result: SectionResult) -> None:
        """No-op - data comes from the run result."""
        pass

    def on_run_complete(self, result: RunResult) -> dict:
        """Generate and write the JSON output.

        Returns:
            The generated JSON data as a dictionary
        """
        output = result.to_dict()

        if self.output_path:
            self._write_to_file(output)

        if self.github_output:
            self._write_github_output(output)

        return output

    def on_fatal(self, message: str, sections: Optional[list[SectionResult]] = None) -> None:
        """Record an aborted run so CI still gets an output file.

        The sections recorded before the abort are written too, so the
        failing step that caused it is visible.
        """
        sections = sections or []
        output = {
            "fatal": message,
            "sections": [section.to_dict() for section in sections],
            "summary": {
                "passed": sum(s.count(ResultStatus.PASS) for s in sections),
                "warned": sum(s.count(ResultStatus.WARN) for s in sections),
                "failed": sum(s.count(ResultStatus.FAIL) for s in sections),
                "all_passed": False,
            },
        }

        if self.output_path:
            self._write_to_file(output)

        if self.github_output:
            self._write_github_output(output)

    def _write_to_file(self, output: dict) -> None:
        path = Path(self.output_path)

        # Create parent directories if needed
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(output, f, indent=2)

    def _write_github_output(self, output: dict) -> None:
        github_output_file = os.environ.get("GITHUB_OUTPUT")
        if not github_output_file:
            return

        summary = output["summary"]
        with open(github_output_file, "a", encoding="utf-8") as f:
            f.write(f"all_passed={str(summary['all_passed']).lower()}\n")
            f.write(f"passed_steps={summary['passed']}\n")
            f.write(f"warned_steps={summary['warned']}\n")
            f.write(f"failed_steps={summary['failed']}\n")

            # Write full JSON as multiline output
            f.write("results<<EOF\n")
            f.write(json.dumps(output))
            f.write("\nEOF\n")
