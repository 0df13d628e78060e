"""CLI output styling utilities.

Provides consistent styling helpers for CLI output:
- Cyan bold for labels
- Green for success messages (with checkmark)
- Red for error messages (with cross)
- Dim for detail output
"""

from __future__ import annotations

__all__ = [
    "style_dim",
    "style_error",
    "style_label",
    "style_success",
]

import click


def style_label(label: str) -> str:
    """Style a label for summary lines.

    Args:
        label: The label text (without colon).

    Returns:
        Styled string with cyan bold and colon suffix.

    Example:
        >>> click.echo(style_label("Project") + " my-app")
        Project: my-app
    """
    return click.style(f"{label}:", fg="cyan", bold=True)


def style_success(message: str) -> str:
    """Style a success message with checkmark.

    Example:
        >>> click.echo(style_success("Secrets added"))
        ✓ Secrets added
    """
    return click.style(f"✓ {message}", fg="green")


def style_error(message: str) -> str:
    """Style an error message with cross mark.

    Example:
        >>> click.echo(style_error("Doppler API error (401)"), err=True)
        ✗ Doppler API error (401)
    """
    return click.style(f"✗ {message}", fg="red")


def style_dim(message: str) -> str:
    """Style detail output as dim."""
    return click.style(message, dim=True)
