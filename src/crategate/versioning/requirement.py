"""Cargo version requirement syntax on top of semantic_version.SimpleSpec.

Cargo reads a bare version (``1.2``) as a caret requirement and allows
whitespace between an operator and its version; SimpleSpec reads a bare
version as an exact match and rejects the whitespace. Each comparator is
normalized before being handed to SimpleSpec.
"""

import re
from typing import List

import semantic_version

from crategate.errors import InvalidVersionRequirementError

_COMPARATOR_RE = re.compile(r"^(\^|~|=|<=|>=|<|>)?\s*(.*)$")
_VERSION_RE = re.compile(
    r"""^
    (?P<major>\d+|[*xX])
    (?:\.(?P<minor>\d+|[*xX]))?
    (?:\.(?P<patch>\d+|[*xX]))?
    (?P<pre>-[0-9A-Za-z.-]+)?
    (?P<build>\+[0-9A-Za-z.-]+)?
    $""",
    re.VERBOSE,
)


def _normalize_comparator(block: str, text: str) -> str:
    """Rewrite one cargo comparator into SimpleSpec syntax."""
    m = _COMPARATOR_RE.match(block.strip())
    op, version = (m.group(1) or ""), m.group(2).strip()
    vm = _VERSION_RE.match(version)
    if not vm:
        raise InvalidVersionRequirementError(text, f"unexpected comparator `{block.strip()}`")

    parts = [vm.group("major"), vm.group("minor"), vm.group("patch")]
    parts = ["*" if p in ("x", "X") else p for p in parts if p is not None]
    wildcard = "*" in parts
    if wildcard:
        tail = parts[parts.index("*"):]
        if tail != ["*"] * len(tail) or vm.group("pre") or vm.group("build"):
            raise InvalidVersionRequirementError(text, f"unexpected version after wildcard in `{block.strip()}`")
    if len(parts) < 3 and (vm.group("pre") or vm.group("build")):
        raise InvalidVersionRequirementError(text, f"prerelease needs a full version in `{block.strip()}`")
    normalized = ".".join(parts) + (vm.group("pre") or "") + (vm.group("build") or "")

    if not op:
        op = "=" if wildcard else "^"
    if op == "^" and not wildcard and len(parts) < 3:
        return _caret_range([int(p) for p in parts])
    return op + normalized


def _caret_range(parts: List[int]) -> str:
    """Explicit bounds for a caret requirement missing its minor or patch.

    ``^0`` allows ``>=0.0.0, <1.0.0`` and ``^0.0`` allows ``>=0.0.0, <0.1.0``;
    SimpleSpec narrows both to exact matches.
    """
    major = parts[0]
    minor = parts[1] if len(parts) > 1 else None
    low = f"{major}.{minor or 0}.0"
    if minor is None or major > 0:
        high = f"{major + 1}.0.0"
    else:
        high = f"0.{minor + 1}.0"
    return f">={low},<{high}"


def normalize_version_req(text: str) -> str:
    """Return the SimpleSpec form of a cargo requirement string.

    Raises:
        InvalidVersionRequirementError: If any comparator is malformed.
    """
    if text is None or not text.strip():
        raise InvalidVersionRequirementError(text or "", "empty requirement")
    blocks: List[str] = text.split(",")
    return ",".join(_normalize_comparator(b, text) for b in blocks)


def parse_version_req(text: str) -> semantic_version.SimpleSpec:
    """Parse a cargo version requirement.

    Args:
        text: Requirement such as ``^0.8``, ``~1.2.3``, ``1.*`` or ``>=1, <2``.

    Returns:
        semantic_version.SimpleSpec: The compiled requirement.

    Raises:
        InvalidVersionRequirementError: If the text is not a valid requirement.
    """
    normalized = normalize_version_req(text)
    try:
        return semantic_version.SimpleSpec(normalized)
    except ValueError as exc:
        raise InvalidVersionRequirementError(text, str(exc)) from exc


def is_valid_version_req(text: str) -> bool:
    """Return True if text parses as a cargo version requirement."""
    try:
        parse_version_req(text)
    except InvalidVersionRequirementError:
        return False
    return True
