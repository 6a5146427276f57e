"""Utility functions for relcount."""

import re

from .errors import ValidationError

# -----------------------------------------------------------------------------
# Repository Validation Constants
# -----------------------------------------------------------------------------

# GitHub "owner/repo" identifier, one slash, no whitespace
_REPO_NAME_PATTERN = re.compile(r"^([A-Za-z0-9_.-]+)/([A-Za-z0-9_.-]+)$")

REPO_FORMAT_MESSAGE = "Please enter a valid format: owner/repo (e.g., facebook/react)"

# -----------------------------------------------------------------------------
# Sparkline Constants
# -----------------------------------------------------------------------------

SPARKLINE_WIDTH = 14

# Characters used to represent values in sparklines (low to high)
SPARKLINE_CHARS = " _.,:-=+*#"


def validate_repo_name(name: str) -> tuple[bool, str]:
    """Validate an "owner/repo" identifier.

    Args:
        name: Repository identifier to validate. Surrounding whitespace is ignored.

    Returns:
        Tuple of (is_valid, error_message). If valid, error_message is empty.
    """
    try:
        parse_repo_name(name)
    except ValidationError as e:
        return False, str(e)
    return True, ""


def parse_repo_name(name: str) -> tuple[str, str]:
    """Split an "owner/repo" identifier into its parts.

    Raises:
        ValidationError: If the identifier is empty or malformed.
    """
    if not name or not name.strip():
        raise ValidationError("Repository cannot be empty")

    match = _REPO_NAME_PATTERN.match(name.strip())
    if match is None:
        raise ValidationError(REPO_FORMAT_MESSAGE)
    return match.group(1), match.group(2)


def percentage(part: int, total: int) -> float:
    """Return part as a percentage of total, 0.0 when total is zero."""
    if total <= 0:
        return 0.0
    return part / total * 100


def make_sparkline(values: list[int], width: int = SPARKLINE_WIDTH) -> str:
    """Generate an ASCII sparkline from a list of values.

    Args:
        values: List of integer values to visualize.
        width: Number of characters in the sparkline (default: SPARKLINE_WIDTH).

    Returns:
        ASCII string representing the trend of values.
    """
    if not values:
        return " " * width

    values = values[-width:]
    if len(values) < width:
        values = [0] * (width - len(values)) + values

    min_val = min(values)
    max_val = max(values)

    if max_val == min_val:
        return SPARKLINE_CHARS[len(SPARKLINE_CHARS) // 2] * width

    scale = len(SPARKLINE_CHARS) - 1
    return "".join(
        SPARKLINE_CHARS[int((v - min_val) / (max_val - min_val) * scale)] for v in values
    )
