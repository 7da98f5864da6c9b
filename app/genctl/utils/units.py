"""Byte-size formatting and parsing helpers."""

KIB = 1024
MIB = KIB * 1024
GIB = MIB * 1024
TIB = GIB * 1024

# Multipliers for the unit words printed by nix-collect-garbage / nix store optimise
_UNIT_MULTIPLIERS: dict[str, int] = {
    "b": 1,
    "bytes": 1,
    "kib": KIB,
    "mib": MIB,
    "gib": GIB,
    "tib": TIB,
}


def format_bytes(size: int) -> str:
    """Return a human-readable size string.

    Args:
        size: Size in bytes.

    Returns:
        Size formatted with one decimal and a binary unit ("1.5 GB"),
        or plain bytes below 1 KiB ("512 B").
    """
    if size >= GIB:
        return f"{size / GIB:.1f} GB"
    if size >= MIB:
        return f"{size / MIB:.1f} MB"
    if size >= KIB:
        return f"{size / KIB:.1f} KB"
    return f"{size} B"


def to_bytes(amount: float, unit: str) -> int:
    """Convert an amount in a Nix-style unit to bytes.

    Args:
        amount: Numeric amount (e.g. 456.78).
        unit: Unit word, case-insensitive (B, bytes, KiB, MiB, GiB, TiB).

    Returns:
        Size in bytes, or 0 for an unknown unit.
    """
    multiplier = _UNIT_MULTIPLIERS.get(unit.lower())
    if multiplier is None:
        return 0
    return int(amount * multiplier)
