"""CLI test fixtures: a runner whose results come without ANSI escapes."""

import json
import re
from typing import Any

import pytest
from typer.testing import CliRunner, Result

from fountainkit.cli.main import app

_ANSI_ESCAPES = re.compile(r"\x1b\[[0-9;]*[A-Za-z]|\x1b\].*?\x07")


def strip_ansi_codes(text: str) -> str:
    """Remove color and hyperlink escape sequences from rich output."""
    return _ANSI_ESCAPES.sub("", text)


class CleanResult:
    """Invocation result with chainable assertions on the plain-text output."""

    def __init__(self, result: Result):
        self._result = result

    @property
    def exit_code(self) -> int:
        return self._result.exit_code

    @property
    def output(self) -> str:
        return strip_ansi_codes(self._result.output)

    @property
    def stdout(self) -> str:
        return strip_ansi_codes(self._result.stdout)

    def assert_success(self) -> "CleanResult":
        assert self.exit_code == 0, (
            f"exit code {self.exit_code}, exception {self._result.exception!r}\n"
            f"{self.output}"
        )
        return self

    def assert_failure(self, exit_code: int | None = None) -> "CleanResult":
        assert self.exit_code != 0, f"command unexpectedly succeeded\n{self.output}"
        if exit_code is not None:
            assert self.exit_code == exit_code, (
                f"exit code {self.exit_code}, expected {exit_code}\n{self.output}"
            )
        return self

    def assert_contains(self, *texts: str) -> "CleanResult":
        missing = [text for text in texts if text not in self.output]
        assert not missing, f"missing {missing} in output:\n{self.output}"
        return self

    def parse_json(self) -> dict[str, Any] | list[Any]:
        """Decode stdout, failing the test with the raw text if it is not JSON."""
        try:
            return json.loads(self.stdout)
        except json.JSONDecodeError as e:
            raise AssertionError(f"stdout is not JSON ({e}):\n{self.stdout}") from e


@pytest.fixture
def clean_runner():
    """CliRunner wrapped to return CleanResult objects."""
    runner = CliRunner()

    def invoke(*args, **kwargs) -> CleanResult:
        return CleanResult(runner.invoke(*args, **kwargs))

    return invoke


@pytest.fixture
def cli_invoke(clean_runner):
    """Run the fountainkit app with the given command line arguments."""

    def invoke(*args: str, **kwargs) -> CleanResult:
        return clean_runner(app, list(args), **kwargs)

    return invoke
