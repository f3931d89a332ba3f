"""Parsing of port forwarding specifications such as ``10080:80,9000-9002:8000-8002``."""

from __future__ import annotations

import re

__all__ = ["TunnelSpecError", "parse_ranges_to_pairs"]

_LEADING_INT = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")
_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1


class TunnelSpecError(ValueError):
    """Raised when a tunnel specification cannot be parsed."""


def _to_int(text: str) -> int:
    """Read the leading decimal number of *text*, ignoring anything after it."""
    match = _LEADING_INT.match(text)
    if match is None:
        raise TunnelSpecError(f"invalid port number {text!r}")
    value = int(match.group(1))
    if not _INT_MIN <= value <= _INT_MAX:
        raise TunnelSpecError(f"port number out of range: {text!r}")
    return value


def _parse_range(text: str) -> tuple[int, int]:
    parts = text.split("-")
    if len(parts) < 2:
        raise TunnelSpecError(f"invalid port range {text!r}")
    return _to_int(parts[0]), _to_int(parts[1])


def _parse_entry(entry: str) -> list[tuple[int, int]]:
    parts = entry.split(":")
    if len(parts) < 2:
        raise TunnelSpecError(f"expected source:destination, got {entry!r}")
    source, destination = parts[0], parts[1]
    source_is_range = "-" in source
    destination_is_range = "-" in destination

    if source_is_range and destination_is_range:
        src_start, src_end = _parse_range(source)
        dst_start, dst_end = _parse_range(destination)
        if src_end - src_start != dst_end - dst_start:
            raise TunnelSpecError("source/destination port range mismatch")
        length = src_end - src_start + 1
        return [(src_start + i, dst_start + i) for i in range(length)]

    if source_is_range or destination_is_range:
        raise TunnelSpecError(
            "Invalid port range syntax: if source is range, destination must be range"
        )

    return [(_to_int(source), _to_int(destination))]


def parse_ranges_to_pairs(spec: str) -> list[tuple[int, int]]:
    """Turn a comma-separated tunnel spec into (source, destination) port pairs.

    Each entry is either ``src:dst`` or an inclusive range pair
    ``srcStart-srcEnd:dstStart-dstEnd`` whose two ranges have the same length.
    """
    pairs: list[tuple[int, int]] = []
    for entry in spec.split(","):
        pairs.extend(_parse_entry(entry))
    return pairs