"""Validation of client-supplied asset file names."""

import re
from typing import Final

# A leading alphanumeric followed by up to 255 of [A-Za-z0-9._-].
ALLOWED_FILE_NAME: Final = re.compile(r"[A-Za-z0-9][A-Za-z0-9._-]{0,255}")

# str.isspace() also counts the information separators U+001C..U+001F as
# whitespace. They are not treated as such here, so they fail the character rule.
INFORMATION_SEPARATORS: Final = frozenset("\x1c\x1d\x1e\x1f")


class InvalidFileNameError(ValueError):
    """Raised when a file name fails validation."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


def sanitize_file_name(file_name: str | None) -> str:
    """
    Validate a single-segment file name.

    Rules are applied in order and the first failure wins. No normalization
    is performed: a valid name is returned exactly as given.

    Args:
        file_name: Raw file name from the request path

    Returns:
        The unchanged file name

    Raises:
        InvalidFileNameError: If the name is rejected, with the violated rule as reason
    """
    if file_name is None or not _trim(file_name):
        raise InvalidFileNameError("filename required")

    if "/" in file_name or "\\" in file_name:
        raise InvalidFileNameError("path separators not allowed")

    if ".." in file_name:
        raise InvalidFileNameError("path traversal not allowed")

    if _trim(file_name) != file_name:
        raise InvalidFileNameError("whitespace not allowed")

    if ALLOWED_FILE_NAME.fullmatch(file_name) is None:
        raise InvalidFileNameError("invalid characters")

    return file_name


def _is_space(char: str) -> bool:
    return char.isspace() and char not in INFORMATION_SEPARATORS


def _trim(value: str) -> str:
    start, end = 0, len(value)
    while start < end and _is_space(value[start]):
        start += 1
    while end > start and _is_space(value[end - 1]):
        end -= 1
    return value[start:end]
