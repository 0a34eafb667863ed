"""Version string helpers."""


def parse_version(version: str) -> tuple[int, ...]:
    """Parse a dotted numeric version.

    A leading ``v`` and any pre-release suffix (``-beta.1``) are ignored.

    Args:
        version: Version string such as "1.4.0".

    Returns:
        Tuple of integer components.

    Raises:
        ValueError: If a component is not numeric.
    """
    core = version.strip().removeprefix("v").split("-", 1)[0].split("+", 1)[0]
    if not core:
        msg = f"Empty version: {version!r}"
        raise ValueError(msg)
    try:
        return tuple(int(part) for part in core.split("."))
    except ValueError:
        msg = f"Invalid version: {version!r}"
        raise ValueError(msg) from None


def compare_versions(a: str, b: str) -> int:
    """Compare two versions.

    Missing components count as zero, so "1.2" equals "1.2.0".

    Returns:
        -1 if a < b, 0 if equal, 1 if a > b.

    Raises:
        ValueError: If either version cannot be parsed.
    """
    left = parse_version(a)
    right = parse_version(b)
    width = max(len(left), len(right))
    left = left + (0,) * (width - len(left))
    right = right + (0,) * (width - len(right))
    return (left > right) - (left < right)


def is_newer_version(candidate: str, current: str) -> bool:
    """Check whether candidate is strictly newer than current."""
    return compare_versions(candidate, current) > 0
