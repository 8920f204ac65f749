"""Command-line entry point for network maintenance tasks."""

from __future__ import annotations

import struct
import sys
from typing import Optional, Sequence

_FLOAT = struct.Struct("=f")


def change_rate(filename: str, scale: float, add: float) -> float:
    """Rewrite the learning rate stored at the start of a weights file.

    The new rate is rate * scale + add; it is returned.
    """
    with open(filename, "r+b") as fp:
        raw = fp.read(_FLOAT.size)
        rate = _FLOAT.unpack(raw)[0] if len(raw) == _FLOAT.size else 0.0
        new_rate = _FLOAT.unpack(_FLOAT.pack(rate * scale + add))[0]
        print(f"Scaling learning rate from {rate:f} to {rate * scale + add:f}")
        fp.seek(0)
        fp.write(_FLOAT.pack(new_rate))
    return new_rate


def _change(args: Sequence[str]) -> int:
    if len(args) < 2:
        print("usage: change <weights> <scale> [add]", file=sys.stderr)
        return 1
    try:
        scale = float(args[1])
        add = float(args[2]) if len(args) > 2 else 0.0
    except ValueError as exc:
        print(f"Bad number: {exc}", file=sys.stderr)
        return 1
    try:
        change_rate(args[0], scale, add)
    except OSError:
        print(f"Couldn't open file: {args[0]}", file=sys.stderr)
        return 1
    return 0


_COMMANDS = {"change": _change}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command named by the first argument."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("usage: darkweave <function>", file=sys.stderr)
        return 0
    command = _COMMANDS.get(args[0])
    if command is None:
        print(f"Not an option: {args[0]}", file=sys.stderr)
        return 0
    return command(args[1:])


if __name__ == "__main__":
    sys.exit(main())