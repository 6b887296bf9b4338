from __future__ import annotations

import os


def norm_path(p: str) -> str:
    """Normalize archive entry names to a canonical forward-slash form.

    Rules:
    - Convert backslashes to slashes
    - Strip leading/trailing slashes
    - Remove empty and '.' segments
    - Reject '..' segments and drive prefixes ("C:")
    """
    p = p.replace("\\", "/").strip("/")
    parts = [q for q in p.split("/") if q not in ("", ".")]
    for q in parts:
        if q == "..":
            raise ValueError("Path may not contain '..'")
    if parts and len(parts[0]) == 2 and parts[0][1] == ":":
        raise ValueError("Path may not carry a drive prefix")
    return "/".join(parts)


def is_single_segment(name: str) -> bool:
    """True when ``name`` is usable as one directory name (no separators, not '.'/'..')."""
    if not name or name in (".", ".."):
        return False
    if "/" in name or "\\" in name:
        return False
    return os.path.basename(name) == name
