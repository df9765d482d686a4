"""
Parsers for the key/value text found in /etc and /proc.

Example:
    parse_delimited_mapping(b'ID=ubuntu\nVERSION_ID="22.04"\n', "=")
    # {"ID": "ubuntu", "VERSION_ID": "22.04"}
"""

from typing import Dict, Iterator, List, Optional, Tuple


def _lines(data: bytes) -> Iterator[str]:
    yield from data.decode("utf-8", errors="replace").splitlines()


def _split(line: str, sep: str) -> Optional[Tuple[str, str]]:
    """Split one line into a key/value pair, None if it holds none."""
    stripped = line.strip()
    if not stripped or stripped.startswith("#") or sep not in stripped:
        return None

    key, value = stripped.split(sep, 1)
    key = key.strip()
    if not key:
        return None

    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return key, value


def parse_delimited_mapping(data: bytes, sep: str) -> Dict[str, str]:
    """
    Parse `key<sep>value` lines into a mapping.

    Args:
        data: Raw text
        sep: Separator between key and value (split on first occurrence)

    Returns:
        Mapping of key to value; later duplicates win
    """
    result: Dict[str, str] = {}
    for line in _lines(data):
        pair = _split(line, sep)
        if pair is not None:
            result[pair[0]] = pair[1]
    return result


def parse_delimited_records(data: bytes, sep: str) -> List[Dict[str, str]]:
    """
    Parse blank-line separated blocks of `key<sep>value` lines.

    Used for /proc/cpuinfo, which holds one block per logical processor.

    Args:
        data: Raw text
        sep: Separator between key and value

    Returns:
        One mapping per non-empty block, in input order
    """
    records: List[Dict[str, str]] = []
    current: Dict[str, str] = {}

    for line in _lines(data):
        if not line.strip():
            if current:
                records.append(current)
                current = {}
            continue
        pair = _split(line, sep)
        if pair is not None:
            current[pair[0]] = pair[1]

    if current:
        records.append(current)
    return records
