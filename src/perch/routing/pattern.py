"""Route path patterns — compiled once at registration, matched per request.

Three kinds of pattern, chosen by ``compile_pattern()``:

- ``LiteralPattern`` — plain strings such as ``/about`` or ``/random.text``.
  Compared by equality, no regex involved.
- ``ParamPattern`` — strings using path syntax: named parameters
  (``/users/:userId``), custom parameter regexes (``/user/:id(\\d+)``),
  optional and repeated atoms (``/ab?cd``, ``/ab+cd``, ``/ab(cd)?e``) and
  wildcards (``/ab*cd``, ``/files/*``). Compiled to a regular expression.
- ``RegexPattern`` — a compiled ``re``/``regex`` pattern supplied by the
  caller, searched anywhere in the path.

Regular expressions run on the ``regex`` engine so every match can be
given a time budget. A match that runs out of budget is logged and
treated as not matching.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, TypeAlias

import regex

from perch.errors import PatternError

logger = logging.getLogger("perch.routing")

# Characters that turn a string path into a ParamPattern
_SPECIAL = frozenset(":?+*()[]\\")

# Default capture for a parameter: one segment, as little as possible
_SEGMENT = r"[^/]+?"

# Literals a leading optional parameter absorbs: "/:id?", ".:ext?"
_ABSORBED = frozenset("/.")

_RE_FLAGS = (
    (re.IGNORECASE, regex.IGNORECASE),
    (re.MULTILINE, regex.MULTILINE),
    (re.DOTALL, regex.DOTALL),
    (re.VERBOSE, regex.VERBOSE),
    (re.ASCII, regex.ASCII),
)


@dataclass(frozen=True, slots=True)
class PatternMatch:
    """A successful pattern match.

    ``matched`` is the prefix of the path the pattern consumed. For
    end-anchored patterns it is the whole path; for mount prefixes the
    rest of the path is handed to the mounted router.
    """

    params: dict[str, str]
    matched: str


# -- Literal ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LiteralPattern:
    """Exact path comparison.

    Unless *strict*, one trailing slash is ignored on both sides.
    Unless *case_sensitive*, comparison ignores case.
    """

    path: str
    case_sensitive: bool = False
    strict: bool = False
    end: bool = True
    _key: str = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        key = self.path
        if not self.end:
            # Mount prefixes never keep a trailing slash; "/" mounts everything
            key = key.rstrip("/")
        elif not self.strict and len(key) > 1 and key.endswith("/"):
            key = key[:-1]
        object.__setattr__(self, "_key", self._fold(key))

    def _fold(self, value: str) -> str:
        return value if self.case_sensitive else value.lower()

    @property
    def keys(self) -> tuple[str, ...]:
        return ()

    def match(self, path: str, *, timeout: float | None = None) -> PatternMatch | None:  # noqa: ARG002
        if self.end:
            candidate = path
            if not self.strict and len(candidate) > 1 and candidate.endswith("/"):
                candidate = candidate[:-1]
            if self._fold(candidate) == self._key:
                return PatternMatch(params={}, matched=path)
            return None

        size = len(self._key)
        if self._fold(path[:size]) != self._key:
            return None
        if len(path) > size and path[size] != "/":
            return None
        return PatternMatch(params={}, matched=path[:size])


# -- Compiled regex patterns ----------------------------------------------------


def _run(compiled: Any, path: str, *, search: bool, timeout: float | None, source: object) -> Any:
    """Apply *compiled* to *path* within *timeout* seconds.

    Returns the regex match object, or ``None`` on no match or overrun.
    """
    try:
        if search:
            return compiled.search(path, timeout=timeout)
        return compiled.match(path, timeout=timeout)
    except TimeoutError:
        logger.warning(
            "Pattern %r exceeded its %.3fs budget on %r; treated as no match",
            source,
            timeout,
            path,
        )
        return None


@dataclass(frozen=True, slots=True)
class ParamPattern:
    """A path-syntax pattern compiled to a regular expression.

    ``groups`` pairs each internal group name with the public parameter
    key: the parameter name for ``:name`` and a position (``"0"``,
    ``"1"``, ...) for unnamed groups and wildcards.
    """

    path: str
    regex: Any
    groups: tuple[tuple[str, str], ...]

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(key for _, key in self.groups)

    def match(self, path: str, *, timeout: float | None = None) -> PatternMatch | None:
        m = _run(self.regex, path, search=False, timeout=timeout, source=self.path)
        if m is None:
            return None
        params: dict[str, str] = {}
        for group, key in self.groups:
            value = m.group(group)
            if value is not None:
                params[key] = value
        return PatternMatch(params=params, matched=m.group(0))


@dataclass(frozen=True, slots=True)
class RegexPattern:
    """A caller-supplied regular expression, searched anywhere in the path.

    Named groups become parameters under their own names; unnamed groups
    are numbered from ``"0"`` in order of appearance.
    """

    regex: Any
    groups: tuple[tuple[int, str], ...]

    @property
    def path(self) -> str:
        return self.regex.pattern

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(key for _, key in self.groups)

    def match(self, path: str, *, timeout: float | None = None) -> PatternMatch | None:
        m = _run(self.regex, path, search=True, timeout=timeout, source=self.regex.pattern)
        if m is None:
            return None
        params: dict[str, str] = {}
        for index, key in self.groups:
            value = m.group(index)
            if value is not None:
                params[key] = value
        return PatternMatch(params=params, matched=path[: m.end()])


PatternSpec: TypeAlias = LiteralPattern | ParamPattern | RegexPattern


# -- Path syntax parser ------------------------------------------------------


@dataclass(slots=True)
class _Lit:
    char: str
    modifier: str = ""


@dataclass(slots=True)
class _Param:
    name: str
    pattern: str | None = None
    modifier: str = ""
    prefix: str = ""  # absorbed "/" or "." for optional/star parameters


@dataclass(slots=True)
class _Group:
    children: list[Any]
    modifier: str = ""


@dataclass(slots=True)
class _Class:
    raw: str
    modifier: str = ""


@dataclass(slots=True)
class _Wildcard:
    full: bool  # whole segment: crosses "/" separators


class _Parser:
    """Recursive-descent parser for route path syntax."""

    def __init__(self, path: str) -> None:
        self.path = path
        self.pos = 0
        self.names: set[str] = set()

    def error(self, reason: str) -> PatternError:
        return PatternError(self.path, reason)

    def parse(self) -> list[Any]:
        nodes = self._sequence(in_group=False)
        if self.pos < len(self.path):
            raise self.error(f"unbalanced ')' at position {self.pos}")
        return nodes

    def _sequence(self, *, in_group: bool) -> list[Any]:
        path = self.path
        nodes: list[Any] = []
        while self.pos < len(path):
            char = path[self.pos]
            if char == ")":
                if in_group:
                    return nodes
                raise self.error(f"unbalanced ')' at position {self.pos}")
            if char == ":":
                self._param(nodes)
            elif char == "(":
                self.pos += 1
                children = self._sequence(in_group=True)
                if self.pos >= len(path):
                    raise self.error("unbalanced '('")
                self.pos += 1
                nodes.append(_Group(children))
            elif char == "[":
                nodes.append(_Class(self._bracketed()))
            elif char == "\\":
                if self.pos + 1 >= len(path):
                    raise self.error("dangling escape at end of path")
                nodes.append(_Lit(path[self.pos + 1]))
                self.pos += 2
            elif char in "?+":
                self._modify(nodes, char)
            elif char == "*":
                last = nodes[-1] if nodes else None
                if isinstance(last, (_Param, _Group, _Class)) and not last.modifier:
                    self._modify(nodes, char)
                else:
                    self._wildcard(nodes)
            else:
                nodes.append(_Lit(char))
                self.pos += 1
        if in_group:
            raise self.error("unbalanced '('")
        return nodes

    def _param(self, nodes: list[Any]) -> None:
        path = self.path
        start = self.pos + 1
        end = start
        while end < len(path) and (path[end].isalnum() or path[end] == "_"):
            end += 1
        name = path[start:end]
        if not name:
            raise self.error(f"parameter without a name at position {self.pos}")
        if name in self.names:
            raise self.error(f"duplicate parameter name {name!r}")
        if nodes and isinstance(nodes[-1], _Param):
            raise self.error(
                f"parameters :{nodes[-1].name} and :{name} need a literal delimiter between them"
            )
        self.names.add(name)
        self.pos = end
        pattern = None
        if self.pos < len(path) and path[self.pos] == "(":
            pattern = self._custom_regex()
        nodes.append(_Param(name, pattern))

    def _custom_regex(self) -> str:
        """Consume ``( ... )`` after a parameter name and return the inside."""
        path = self.path
        depth = 0
        start = self.pos + 1
        while self.pos < len(path):
            char = path[self.pos]
            if char == "\\":
                self.pos += 2
                continue
            if char == "[":
                self._bracketed()
                continue
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
                if depth == 0:
                    inner = path[start : self.pos]
                    self.pos += 1
                    if not inner:
                        raise self.error("empty parameter regex")
                    return inner
            self.pos += 1
        raise self.error("unbalanced '(' in parameter regex")

    def _bracketed(self) -> str:
        """Consume a ``[...]`` character class and return it verbatim."""
        path = self.path
        start = self.pos
        self.pos += 1
        if self.pos < len(path) and path[self.pos] == "^":
            self.pos += 1
        if self.pos < len(path) and path[self.pos] == "]":
            self.pos += 1
        while self.pos < len(path):
            char = path[self.pos]
            if char == "\\":
                self.pos += 2
                continue
            self.pos += 1
            if char == "]":
                return path[start : self.pos]
        raise self.error("unbalanced '['")

    def _modify(self, nodes: list[Any], modifier: str) -> None:
        last = nodes[-1] if nodes else None
        if last is None or isinstance(last, _Wildcard) or last.modifier:
            raise self.error(f"{modifier!r} at position {self.pos} has nothing to repeat")
        last.modifier = modifier
        if isinstance(last, _Param) and modifier in "?*" and len(nodes) > 1:
            before = nodes[-2]
            if isinstance(before, _Lit) and not before.modifier and before.char in _ABSORBED:
                last.prefix = before.char
                del nodes[-2]
        self.pos += 1

    def _wildcard(self, nodes: list[Any]) -> None:
        after = self.pos + 1
        at_segment_start = not nodes or (isinstance(nodes[-1], _Lit) and nodes[-1].char == "/")
        at_segment_end = after >= len(self.path) or self.path[after] == "/"
        nodes.append(_Wildcard(full=at_segment_start and at_segment_end))
        self.pos = after


class _Emitter:
    """Turns parsed nodes into regex source and the group/key table."""

    def __init__(self) -> None:
        self.groups: list[tuple[str, str]] = []
        self.unnamed = 0

    def _group_name(self, key: str | None) -> str:
        if key is None:
            key = str(self.unnamed)
            self.unnamed += 1
        name = f"_k{len(self.groups)}"
        self.groups.append((name, key))
        return name

    def emit(self, nodes: list[Any]) -> str:
        return "".join(self._node(node) for node in nodes)

    def _node(self, node: Any) -> str:
        match node:
            case _Lit(char=char, modifier=modifier):
                return regex.escape(char) + modifier
            case _Class(raw=raw, modifier=modifier):
                return raw + modifier
            case _Wildcard(full=full):
                name = self._group_name(None)
                body = ".*" if full else "[^/]*"
                return f"(?P<{name}>{body})"
            case _Group(children=children, modifier=modifier):
                name = self._group_name(None)
                return f"(?P<{name}>{self.emit(children)}){modifier}"
            case _Param():
                return self._param(node)
        msg = f"unknown path node {node!r}"
        raise TypeError(msg)

    def _param(self, node: _Param) -> str:
        name = self._group_name(node.name)
        segment = f"(?:{node.pattern})" if node.pattern else _SEGMENT
        prefix = regex.escape(node.prefix)
        match node.modifier:
            case "":
                return f"(?P<{name}>{segment})"
            case "?":
                return f"(?:{prefix}(?P<{name}>{segment}))?"
            case "+":
                return f"(?P<{name}>{segment}(?:/{segment})*)"
            case "*":
                return f"(?:{prefix}(?P<{name}>{segment}(?:/{segment})*))?"
        msg = f"unknown modifier {node.modifier!r}"
        raise ValueError(msg)


def _compile_regex(path: object, source: str, flags: int) -> Any:
    try:
        return regex.compile(source, flags)
    except regex.error as exc:
        raise PatternError(path, f"malformed regular expression ({exc})") from exc


def _regex_flags(pattern: Any) -> int:
    """Translate ``re`` flags; the two modules number some flags differently."""
    if not isinstance(pattern, re.Pattern):
        return pattern.flags
    return sum(ours for theirs, ours in _RE_FLAGS if pattern.flags & theirs)


# Named group openers: "(?P<name>" and "(?<name>"
_NAMED_GROUP = regex.compile(r"(?<!\\)\(\?P?<(\w+)>")


def _from_regex(pattern: Any) -> RegexPattern:
    seen: set[str] = set()
    for name in _NAMED_GROUP.findall(pattern.pattern):
        if name in seen:
            raise PatternError(pattern.pattern, f"duplicate parameter name {name!r}")
        seen.add(name)
    compiled = _compile_regex(pattern.pattern, pattern.pattern, _regex_flags(pattern))
    named = {index: name for name, index in compiled.groupindex.items()}
    groups: list[tuple[int, str]] = []
    unnamed = 0
    for index in range(1, compiled.groups + 1):
        if index in named:
            groups.append((index, named[index]))
        else:
            groups.append((index, str(unnamed)))
            unnamed += 1
    return RegexPattern(regex=compiled, groups=tuple(groups))


def compile_pattern(
    path: str | re.Pattern[str] | Any,
    *,
    case_sensitive: bool = False,
    strict: bool = False,
    end: bool = True,
) -> PatternSpec:
    """Compile a route path into a pattern.

    Args:
        path: A path string, or a compiled regular expression.
        case_sensitive: Match letter case exactly.
        strict: Treat a trailing slash as significant.
        end: Anchor at the end of the path. Mount prefixes pass
            ``False`` so the pattern matches whole leading segments.

    Raises:
        PatternError: If the path cannot be compiled.
    """
    if not isinstance(path, str):
        if not hasattr(path, "pattern") or not hasattr(path, "flags"):
            msg = f"Route path must be a string or compiled regex, got {type(path).__name__}"
            raise TypeError(msg)
        return _from_regex(path)

    if not path.startswith("/") and path != "*":
        raise PatternError(path, "route paths must start with '/'")

    if not _SPECIAL.intersection(path):
        return LiteralPattern(path, case_sensitive=case_sensitive, strict=strict, end=end)

    source_path = path
    if not end and len(path) > 1:
        path = path.rstrip("/")

    nodes = _Parser(path).parse()
    emitter = _Emitter()
    body = emitter.emit(nodes)

    if end:
        if not strict:
            last = nodes[-1] if nodes else None
            if isinstance(last, _Lit) and last.char == "/" and not last.modifier:
                body += "?"
            else:
                body += "/?"
        body += r"\Z"
    else:
        body += r"(?=/|\Z)"

    flags = 0 if case_sensitive else regex.IGNORECASE
    compiled = _compile_regex(source_path, body, flags)
    return ParamPattern(path=source_path, regex=compiled, groups=tuple(emitter.groups))
