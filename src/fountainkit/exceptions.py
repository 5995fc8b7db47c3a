"""Exceptions raised by fountainkit.

Malformed screenplay markup never raises: the lexer always degrades to a
best-effort token stream. These exceptions cover the edges around the core,
such as configuration files, input files and render options.
"""

from __future__ import annotations

from typing import Any


class FountainKitError(Exception):
    """Base class for fountainkit errors.

    Carries a one-line message plus an optional hint for the user and a
    details mapping for logs and JSON error responses.
    """

    def __init__(
        self,
        message: str,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: What went wrong
            hint: How to fix it, if known
            details: Extra values such as the offending path or key
        """
        self.message = message
        self.hint = hint
        self.details = details
        super().__init__(self.format_error())

    def format_error(self) -> str:
        """Render message, hint and details as multi-line text."""
        lines = [f"Error: {self.message}"]
        if self.hint:
            lines.append(f"Hint: {self.hint}")
        if self.details:
            lines.append("Details:")
            lines.extend(f"  {key}: {value}" for key, value in self.details.items())
        return "\n".join(lines)


class ConfigurationError(FountainKitError):
    """Invalid settings or an unreadable config file."""


class ParseError(FountainKitError):
    """Input that cannot be turned into text, such as an undecodable file."""


class FountainFileNotFoundError(FountainKitError):
    """The Fountain file to parse does not exist."""


class RenderError(FountainKitError):
    """Invalid render options passed to the inline style re-lexer."""


# Keys people tend to write instead of the real setting names
_MISSPELLED_KEYS = {
    "show_notes": "print_notes",
    "merge_empty": "merge_empty_lines",
    "dual_dialogue": "use_dual_dialogue",
    "dialog_sec_per_char": "dial_sec_per_char",
    "dialogue_sec_per_char": "dial_sec_per_char",
    "action_sec_per_chars": "action_sec_per_char",
    "note_colour": "note_color",
}


def check_config_keys(config: dict[str, Any]) -> None:
    """Reject config data that uses a known misspelling of a setting.

    Args:
        config: Raw key/value pairs read from a config file

    Raises:
        ConfigurationError: Naming the key that should have been used
    """
    wrong = next((key for key in _MISSPELLED_KEYS if key in config), None)
    if wrong is None:
        return
    correct = _MISSPELLED_KEYS[wrong]
    raise ConfigurationError(
        message=f"Invalid configuration key '{wrong}'",
        hint=f"Use '{correct}' instead of '{wrong}'",
        details={
            "found_keys": list(config),
            "invalid_key": wrong,
            "correct_key": correct,
        },
    )
