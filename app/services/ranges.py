"""HTTP byte-range request parsing."""

from dataclasses import dataclass


class RangeNotSatisfiableError(Exception):
    """Raised when a well-formed range lies entirely outside the resource."""

    def __init__(self, size_bytes: int) -> None:
        super().__init__(f"Range not satisfiable for resource of {size_bytes} bytes")
        self.size_bytes = size_bytes


@dataclass(frozen=True)
class ByteRange:
    """Inclusive byte range within a resource."""

    start: int
    end: int

    @property
    def length(self) -> int:
        """Number of bytes covered."""
        return self.end - self.start + 1

    def content_range(self, size_bytes: int) -> str:
        """Render the Content-Range header value."""
        return f"bytes {self.start}-{self.end}/{size_bytes}"


def parse_range_header(header: str | None, size_bytes: int) -> ByteRange | None:
    """
    Parse a single-range ``Range`` header.

    Headers that are malformed, use another unit, or ask for more than one
    range are ignored and the full resource is served.

    Args:
        header: Raw Range header value
        size_bytes: Size of the resource

    Returns:
        The satisfiable range, or None to serve the whole resource

    Raises:
        RangeNotSatisfiableError: If the single requested range cannot be satisfied
    """
    if not header:
        return None

    unit, _, spec = header.partition("=")
    if unit.strip().lower() != "bytes" or not spec.strip():
        return None
    if "," in spec:
        return None

    first, sep, last = spec.strip().partition("-")
    if not sep:
        return None
    first, last = first.strip(), last.strip()

    if not first:
        # Suffix range: the final N bytes.
        if not _is_number(last):
            return None
        suffix_length = int(last)
        if suffix_length == 0 or size_bytes == 0:
            raise RangeNotSatisfiableError(size_bytes)
        return ByteRange(start=max(0, size_bytes - suffix_length), end=size_bytes - 1)

    if not _is_number(first) or (last and not _is_number(last)):
        return None

    start = int(first)
    end = int(last) if last else size_bytes - 1
    if end < start:
        return None
    if start >= size_bytes:
        raise RangeNotSatisfiableError(size_bytes)

    return ByteRange(start=start, end=min(end, size_bytes - 1))


def _is_number(value: str) -> bool:
    return value.isascii() and value.isdigit()
