"""
Composer version constraints — normalisation, matching and ordering.

Implements the subset of composer/semver behaviour eddev needs to pick a
recipe version from Packagist and to read the lowest PHP version out of a
recipe's ``php`` requirement:

    normalize_version("v5.2")      → "5.2.0.0"
    normalize_version("5.x-dev")   → "5.9999999.9999999.9999999-dev"
    parse_constraint("^8.1")       → >=8.1.0.0-dev, <9.0.0.0-dev
    satisfied_by(["5.1.0", "5.2.3", "6.0.0"], "~5.1")  → ["5.1.0", "5.2.3"]

Ordering of normalised versions is delegated to ``packaging.version``
after mapping Composer's stability suffixes onto PEP 440 equivalents
(dev < alpha < beta < RC < stable < patch in both schemes).
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from packaging.version import InvalidVersion, Version

_MODIFIER = r"[._-]?(?:(stable|beta|b|RC|alpha|a|patch|pl|p)((?:[.-]?\d+)*)?)?([.-]?dev)?"
_NUMBERS = r"v?(\d{1,5})(\.\d+)?(\.\d+)?(\.\d+)?"

_CLASSICAL_RE = re.compile(rf"^{_NUMBERS}{_MODIFIER}$", re.IGNORECASE)
_DATE_RE = re.compile(
    rf"^v?(\d{{4}}(?:[.:-]?\d{{2}}){{1,6}}(?:[.:-]?\d{{1,3}}){{0,2}}){_MODIFIER}$",
    re.IGNORECASE,
)
_BRANCH_RE = re.compile(r"^v?(\d+)(\.(?:\d+|[xX*]))?(\.(?:\d+|[xX*]))?(\.(?:\d+|[xX*]))?$")
_DEV_SUFFIX_RE = re.compile(r"^(.*?)[.-]?dev$", re.IGNORECASE)
_ALIAS_RE = re.compile(r"^([^,\s]+) +as +([^,\s]+)$")
_FLAG_RE = re.compile(r"@(?:stable|RC|beta|alpha|dev)$", re.IGNORECASE)
_BUILD_RE = re.compile(r"^([^,\s+]+)\+\S+$")
_DEFAULT_BRANCH_RE = re.compile(r"^(?:dev-)?(?:master|trunk|default)$", re.IGNORECASE)

# constraint grammar; numbers are captured separately from the modifier
_VERSION = r"v?(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:\.(\d+))?" + _MODIFIER + r"(?:\+\S+)?"
_TILDE_RE = re.compile(rf"^~{_VERSION}$", re.IGNORECASE)
_CARET_RE = re.compile(rf"^\^{_VERSION}$", re.IGNORECASE)
_WILDCARD_RE = re.compile(r"^v?(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:\.[xX*])+$")
_MATCH_ALL_RE = re.compile(r"^v?[xX*](?:\.[xX*])*$")
_OPERATOR_RE = re.compile(r"^(<>|!=|>=?|<=?|==?)?\s*(.*)$")
_CONSTRAINT_FLAG_RE = re.compile(r"^([^,\s]*?)@(stable|RC|beta|alpha|dev)$", re.IGNORECASE)
_VCS_REF_RE = re.compile(r"^(dev-[^,\s@]+?|[^,\s@]+?\.x-dev)#.+$")
_HYPHEN_RE = re.compile(r"^(\S+) +- +(\S+)$")
_OPERATOR_GAP_RE = re.compile(r"(<>|!=|>=|<=|==|[<>=~^])\s+")

_STABILITY_ALIASES = {"a": "alpha", "b": "beta", "p": "patch", "pl": "patch", "rc": "RC"}
_PEP440_SUFFIX = {"alpha": "a", "beta": "b", "RC": "rc", "patch": ".post"}

BRANCH_PADDING = "9999999"


def _expand_stability(stability: str) -> str:
    lowered = stability.lower()
    return _STABILITY_ALIASES.get(lowered, lowered)


def _apply_modifier(version: str, stability: str | None, number: str | None, dev: str | None) -> str:
    if stability:
        if stability.lower() == "stable":
            return version
        version += "-" + _expand_stability(stability) + (number or "").lstrip(".-")
    if dev:
        version += "-dev"
    return version


def normalize_branch(name: str) -> str:
    """Normalise a branch name: ``5.x`` → ``5.9999999.9999999.9999999-dev``."""
    name = name.strip()
    m = _BRANCH_RE.match(name)
    if not m:
        return "dev-" + name
    parts = []
    for group in m.groups():
        parts.append(group.replace("*", "x").replace("X", "x") if group else ".x")
    return "".join(parts).replace("x", BRANCH_PADDING) + "-dev"


def normalize_version(version: str) -> str:
    """Normalise a Composer version string to its four-part canonical form.

    Raises:
        ValueError: If the string is not a valid Composer version.
    """
    original = version
    version = version.strip()

    alias = _ALIAS_RE.match(version)
    if alias:
        version = alias.group(1)
    version = _FLAG_RE.sub("", version)

    if _DEFAULT_BRANCH_RE.match(version):
        return "dev-" + re.sub(r"^dev-", "", version, flags=re.IGNORECASE)
    if version[:4].lower() == "dev-":
        return "dev-" + version[4:]

    build = _BUILD_RE.match(version)
    if build:
        version = build.group(1)

    m = _CLASSICAL_RE.match(version)
    if m:
        numbers = m.group(1) + "".join(g or ".0" for g in m.group(2, 3, 4))
        return _apply_modifier(numbers, m.group(5), m.group(6), m.group(7))

    m = _DATE_RE.match(version)
    if m:
        numbers = re.sub(r"\D", ".", m.group(1))
        return _apply_modifier(numbers, m.group(2), m.group(3), m.group(4))

    m = _DEV_SUFFIX_RE.match(version)
    if m:
        normalized = normalize_branch(m.group(1))
        if not normalized.startswith("dev-"):
            return normalized

    raise ValueError(f"Invalid version string '{original}'")


def is_branch(normalized: str) -> bool:
    return normalized.startswith("dev-")


def version_key(normalized: str) -> tuple[int, Version]:
    """Sort key for a normalised version.

    Default branches (``dev-master`` and friends) sort above every
    numbered version; other ``dev-*`` branches sort below them all.
    """
    if is_branch(normalized):
        if _DEFAULT_BRANCH_RE.match(normalized):
            return (2, Version("0"))
        return (0, Version("0"))

    base, _, suffix = normalized.partition("-")
    pep440 = base
    for piece in filter(None, suffix.split("-")):
        if piece == "dev":
            pep440 += ".dev0"
            continue
        word = re.match(r"([A-Za-z]+)(\d*)", piece)
        if word and word.group(1) in _PEP440_SUFFIX:
            pep440 += _PEP440_SUFFIX[word.group(1)] + (word.group(2) or "0")
    try:
        return (1, Version(pep440))
    except InvalidVersion as e:
        raise ValueError(f"Cannot order version '{normalized}'") from e


def compare(a: str, b: str) -> int:
    """Three-way comparison of two normalised versions."""
    ka, kb = version_key(a), version_key(b)
    return (ka > kb) - (ka < kb)


@dataclass(frozen=True)
class Bound:
    """One ``<operator> <normalised version>`` term."""

    operator: str
    version: str

    def matches(self, candidate: str) -> bool:
        op = {"=": "==", "<>": "!="}.get(self.operator, self.operator)
        a_branch, b_branch = is_branch(candidate), is_branch(self.version)
        if op == "!=" and (a_branch or b_branch):
            return candidate != self.version
        if a_branch or b_branch:
            return op == "==" and candidate == self.version
        result = compare(candidate, self.version)
        return {
            "==": result == 0,
            "!=": result != 0,
            "<": result < 0,
            "<=": result <= 0,
            ">": result > 0,
            ">=": result >= 0,
        }[op]

    def __str__(self) -> str:
        return f"{self.operator}{self.version}"


@dataclass(frozen=True)
class Constraint:
    """A parsed constraint: OR of AND-groups of bounds.

    An empty AND-group matches everything.
    """

    pretty: str
    branches: tuple[tuple[Bound, ...], ...] = field(default_factory=tuple)

    def matches(self, normalized: str) -> bool:
        return any(all(b.matches(normalized) for b in group) for group in self.branches)

    def lower_bound(self) -> str | None:
        """Lowest version the constraint admits, or None if unbounded below.

        Within an AND-group the tightest floor wins; across OR-groups the
        lowest floor wins. ``<8`` and ``*`` have no floor.
        """
        floors: list[str] = []
        for group in self.branches:
            group_floors = [b.version for b in group if b.operator in (">", ">=", "==", "=")]
            if not group_floors:
                return None
            floors.append(max(group_floors, key=version_key))
        if not floors:
            return None
        return min(floors, key=version_key)

    def __str__(self) -> str:
        return " || ".join(" ".join(str(b) for b in group) or "*" for group in self.branches)


def _bump(numbers: list[str], position: int, increment: int = 0) -> str:
    """Pad/increment a numeric version at ``position`` (1-based)."""
    parts = [int(n) if n else 0 for n in numbers]
    for i in range(3, -1, -1):
        if i + 1 > position:
            parts[i] = 0
        elif i + 1 == position and increment:
            parts[i] += increment
    return ".".join(str(p) for p in parts)


def _has_modifier(m: re.Match) -> bool:
    return bool(m.group(5) or m.group(7))


def _parse_single(term: str) -> list[Bound]:
    stability_flag = None
    flagged = _CONSTRAINT_FLAG_RE.match(term)
    if flagged:
        term = flagged.group(1) or "*"
        if flagged.group(2).lower() != "stable":
            stability_flag = flagged.group(2)

    ref = _VCS_REF_RE.match(term)
    if ref:
        term = ref.group(1)

    if _MATCH_ALL_RE.match(term):
        return []

    m = _TILDE_RE.match(term)
    if m:
        numbers = [m.group(i) for i in (1, 2, 3, 4)]
        position = max(i for i, n in enumerate(numbers, start=1) if n)
        suffix = "" if _has_modifier(m) else "-dev"
        low = normalize_version(term[1:] + suffix)
        high = _bump(numbers, max(1, position - 1), 1) + "-dev"
        return [Bound(">=", low), Bound("<", high)]

    m = _CARET_RE.match(term)
    if m:
        major, minor, patch = m.group(1), m.group(2), m.group(3)
        if major != "0" or not minor:
            position = 1
        elif minor != "0" or not patch:
            position = 2
        else:
            position = 3
        suffix = "" if _has_modifier(m) else "-dev"
        low = normalize_version(term[1:] + suffix)
        high = _bump([m.group(i) for i in (1, 2, 3, 4)], position, 1) + "-dev"
        return [Bound(">=", low), Bound("<", high)]

    m = _WILDCARD_RE.match(term)
    if m:
        numbers = [m.group(1), m.group(2), m.group(3), None]
        position = 3 if m.group(3) else 2 if m.group(2) else 1
        low = _bump(numbers, position) + "-dev"
        high = _bump(numbers, position, 1) + "-dev"
        if low == "0.0.0.0-dev":
            return [Bound("<", high)]
        return [Bound(">=", low), Bound("<", high)]

    m = _OPERATOR_RE.match(term)
    operator, raw = m.group(1) or "=", m.group(2)
    version = normalize_version(raw)
    if stability_flag and "-" not in version and not is_branch(version):
        version += "-" + _expand_stability(stability_flag)
    elif operator in ("<", ">=") and not is_branch(version):
        if not re.search(rf"-{_MODIFIER}$", raw.lower()):
            version += "-dev"
    return [Bound(operator, version)]


def _parse_hyphen(lower: str, upper: str) -> list[Bound]:
    low_match = re.match(rf"^{_VERSION}$", lower, re.IGNORECASE)
    high_match = re.match(rf"^{_VERSION}$", upper, re.IGNORECASE)
    if not low_match or not high_match:
        raise ValueError(f"Invalid hyphen range '{lower} - {upper}'")

    low = normalize_version(lower)
    if not _has_modifier(low_match):
        low += "-dev"

    if (high_match.group(2) and high_match.group(3)) or _has_modifier(high_match):
        return [Bound(">=", low), Bound("<=", normalize_version(upper))]
    position = 2 if high_match.group(2) else 1
    high = _bump([high_match.group(i) for i in (1, 2, 3, 4)], position, 1) + "-dev"
    return [Bound(">=", low), Bound("<", high)]


def parse_constraint(text: str) -> Constraint:
    """Parse a Composer constraint expression.

    Raises:
        ValueError: On malformed input.
    """
    pretty = text
    text = text.strip()
    if not text:
        raise ValueError("Empty constraint")

    groups: list[tuple[Bound, ...]] = []
    for or_part in re.split(r"\s*\|\|?\s*", text):
        or_part = or_part.strip()
        if not or_part:
            raise ValueError(f"Invalid constraint '{pretty}'")
        hyphen = _HYPHEN_RE.match(or_part)
        if hyphen:
            groups.append(tuple(_parse_hyphen(hyphen.group(1), hyphen.group(2))))
            continue
        collapsed = _OPERATOR_GAP_RE.sub(r"\1", or_part)
        bounds: list[Bound] = []
        for term in filter(None, re.split(r"\s*,\s*|\s+", collapsed)):
            bounds.extend(_parse_single(term))
        groups.append(tuple(bounds))
    return Constraint(pretty=pretty, branches=tuple(groups))


def satisfies(version: str, constraint: str | Constraint) -> bool:
    """Whether a (raw) version satisfies the constraint."""
    parsed = constraint if isinstance(constraint, Constraint) else parse_constraint(constraint)
    try:
        normalized = normalize_version(version)
    except ValueError:
        return False
    return parsed.matches(normalized)


def satisfied_by(versions: Iterable[str], constraint: str) -> list[str]:
    """Subset of ``versions`` satisfying ``constraint`` (input order kept)."""
    parsed = parse_constraint(constraint)
    return [v for v in versions if satisfies(v, parsed)]


def rsort(versions: Iterable[str]) -> list[str]:
    """Sort raw versions from highest to lowest, dropping unparseable ones."""
    keyed = []
    for v in versions:
        try:
            keyed.append((version_key(normalize_version(v)), v))
        except ValueError:
            continue
    keyed.sort(key=lambda item: item[0], reverse=True)
    return [v for _, v in keyed]
