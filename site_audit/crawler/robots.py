"""
Parser and checker for robots.txt rules (RFC 9309).
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from site_audit.errors import RobotsParseError

__all__ = ("RobotsTxtRules", "parse_robots")

_WILDCARD_RE = re.compile(r"[*$]")


@dataclass(slots=True)
class _Group:
    agents: List[str] = field(default_factory=list)
    rules: List[Tuple[bool, str]] = field(default_factory=list)
    # set by any allow/disallow line, including an empty one
    closed: bool = False


class RobotsTxtRules:
    """
    Ruleset for one host.

    The most specific matching rule wins; on equal length ``Allow`` beats
    ``Disallow``. An empty ``Disallow`` allows everything and a path with no
    matching rule is allowed.
    """

    def __init__(self, text: str) -> None:
        self._groups: List[_Group] = []
        self._patterns: Dict[str, re.Pattern[str]] = {}
        self._parse(text)

    def can_fetch(self, user_agent: str, path: str) -> bool:
        group = self._match_group(user_agent)
        if group is None:
            return True
        best_len = -1
        allowed = True
        for allow, pattern in group.rules:
            if not self._match_path(path, pattern):
                continue
            length = len(_WILDCARD_RE.sub("", pattern))
            if length > best_len or (length == best_len and allow):
                best_len = length
                allowed = allow
        return allowed

    def _parse(self, text: str) -> None:
        current: Optional[_Group] = None

        def group() -> _Group:
            # rules before any user-agent line apply to everyone
            nonlocal current
            if current is None:
                current = _Group(agents=["*"])
                self._groups.append(current)
            return current

        for raw in text.splitlines():
            line = raw.split("#", 1)[0].strip()
            if not line or ":" not in line:
                continue
            key, _, value = line.partition(":")
            key = key.strip().lower()
            value = value.strip()
            if key == "user-agent":
                if current is None or current.closed:
                    current = _Group()
                    self._groups.append(current)
                current.agents.append(value.lower())
            elif key in ("allow", "disallow"):
                target = group()
                target.closed = True
                if value:
                    target.rules.append((key == "allow", value))

    def _match_group(self, user_agent: str) -> Optional[_Group]:
        ua = user_agent.lower()
        for group in self._groups:
            if any(agent != "*" and ua.startswith(agent) for agent in group.agents):
                return group
        for group in self._groups:
            if "*" in group.agents:
                return group
        return None

    def _match_path(self, path: str, pattern: str) -> bool:
        regex = self._patterns.get(pattern)
        if regex is None:
            anchored = pattern.endswith("$")
            body = re.escape(pattern[:-1] if anchored else pattern).replace(r"\*", ".*")
            regex = re.compile(body + ("$" if anchored else ""))
            self._patterns[pattern] = regex
        return regex.match(path) is not None


def parse_robots(body: bytes) -> RobotsTxtRules:
    """Build a ruleset from a raw robots.txt body."""
    try:
        text = body.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise RobotsParseError(f"robots.txt is not valid UTF-8: {exc}") from exc
    return RobotsTxtRules(text)
