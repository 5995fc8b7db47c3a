"""Pytest configuration and fixtures."""

import os

import pytest

from fountainkit.config import FountainKitSettings, reset_settings, set_settings

# Import CLI fixtures to make them available globally
from tests.cli_fixtures import clean_runner, cli_invoke  # noqa: F401


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Run every test with default settings and no user config files.

    Environment variables with the FOUNTAINKIT_ prefix are removed and the
    working directory is a temporary one, so config files in the real home
    or checkout cannot leak into the tests.
    """
    for var in [k for k in os.environ if k.startswith("FOUNTAINKIT_")]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)

    reset_settings()
    set_settings(FountainKitSettings())

    yield

    reset_settings()


@pytest.fixture
def settings_factory():
    """Build settings with overrides, without touching the global instance."""

    def factory(**overrides) -> FountainKitSettings:
        return FountainKitSettings(**overrides)

    return factory


@pytest.fixture
def sample_script() -> str:
    """A short screenplay exercising most block types."""
    return (
        "Title: The Heist\n"
        "Credit: Written by\n"
        "Author: Jane Doe\n"
        "Draft date: 1/1/2024\n"
        "\n"
        "# Act One\n"
        "\n"
        "= The crew assembles.\n"
        "\n"
        "INT. WAREHOUSE - NIGHT #1#\n"
        "\n"
        "MAX paces. [[Lighting is low.]]\n"
        "\n"
        "MAX\n"
        "(quietly)\n"
        "Everyone ready?\n"
        "\n"
        "LENA\n"
        "Always.\n"
        "\n"
        "CUT TO:\n"
        "\n"
        "EXT. BANK - DAY\n"
        "\n"
        "The street is *quiet*.\n"
        "\n"
        "> THE END <\n"
    )
