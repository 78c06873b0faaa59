from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple
from urllib.parse import urlsplit

from .directives import DirectiveKind
from .matching import pattern_matches
from .policy import WILDCARD, Policy, Rule, RuleGroup


class TieBreak(Enum):
    """Verdict used when equally long matching rules disagree."""

    ALLOW = "allow"
    DISALLOW = "disallow"


class DuplicateAgents(Enum):
    """How several groups naming the same agent are combined."""

    FIRST = "first"
    MERGE = "merge"


@dataclass(frozen=True)
class EvaluatorOptions:
    tie_break: TieBreak = TieBreak.ALLOW
    duplicate_agents: DuplicateAgents = DuplicateAgents.FIRST


DEFAULT_OPTIONS = EvaluatorOptions()


@dataclass(frozen=True)
class Decision:
    allowed: bool
    rule: Optional[Rule] = None
    group_agent: Optional[str] = None

    @property
    def matched_rule_kind(self) -> Optional[DirectiveKind]:
        return self.rule.verdict if self.rule else None

    @property
    def matched_pattern(self) -> Optional[str]:
        return self.rule.pattern if self.rule else None


def _require_str(name: str, value) -> None:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a str, not {type(value).__name__}")


def _groups_for(policy: Policy, agent: str, options: EvaluatorOptions) -> List[RuleGroup]:
    found = [g for g in policy.groups if agent in g.agents]
    if options.duplicate_agents is DuplicateAgents.FIRST:
        return found[:1]
    return found


def select_group(
    policy: Policy, agent: str, options: Optional[EvaluatorOptions] = None
) -> Tuple[Optional[RuleGroup], Optional[str]]:
    """
    Pick the group that governs `agent`.

    An exact (case-insensitive) agent name beats the '*' group; with neither
    present there is no group and everything is allowed. Returns the group and
    the agent name it was selected by. In MERGE mode the returned group carries
    the rules of every group for that name.
    """
    _require_str("agent", agent)
    options = options or DEFAULT_OPTIONS

    name = agent.lower()
    for key in (name, WILDCARD):
        groups = _groups_for(policy, key, options)
        if not groups:
            continue
        if len(groups) == 1:
            return groups[0], key
        merged = RuleGroup(
            agents=(key,),
            rules=tuple(r for g in groups for r in g.rules),
            crawl_delays=tuple(c for g in groups for c in g.crawl_delays),
            line=groups[0].line,
        )
        return merged, key
    return None, None


def _wins(candidate: Rule, best: Optional[Rule], tie_break: TieBreak) -> bool:
    if best is None:
        return True
    if len(candidate.pattern) != len(best.pattern):
        return len(candidate.pattern) > len(best.pattern)
    if candidate.verdict is best.verdict:
        return False
    return candidate.allows == (tie_break is TieBreak.ALLOW)


def explain(
    policy: Policy, agent: str, path: str, options: Optional[EvaluatorOptions] = None
) -> Decision:
    """
    Decide whether `agent` may fetch `path` and report which rule decided it.

    The longest matching pattern wins; equal lengths fall back to the tie-break
    option (Allow by default). No group or no matching rule means allowed.
    """
    _require_str("agent", agent)
    _require_str("path", path)
    options = options or DEFAULT_OPTIONS

    group, matched_by = select_group(policy, agent, options)
    if group is None:
        return Decision(allowed=True)

    path = path or "/"
    best: Optional[Rule] = None
    for rule in group.rules:
        if pattern_matches(rule.pattern, path) and _wins(rule, best, options.tie_break):
            best = rule

    if best is None:
        return Decision(allowed=True, group_agent=matched_by)
    return Decision(allowed=best.allows, rule=best, group_agent=matched_by)


def is_allowed(
    policy: Policy, agent: str, path: str, options: Optional[EvaluatorOptions] = None
) -> bool:
    return explain(policy, agent, path, options).allowed


def url_path(url: str) -> str:
    """Path plus query of a URL, the part robots rules are matched against."""
    parts = urlsplit(url)
    path = parts.path or "/"
    if parts.query:
        path = f"{path}?{parts.query}"
    return path


def is_url_allowed(
    policy: Policy, agent: str, url: str, options: Optional[EvaluatorOptions] = None
) -> bool:
    _require_str("url", url)
    return is_allowed(policy, agent, url_path(url), options)


def crawl_delay(
    policy: Policy, agent: str, options: Optional[EvaluatorOptions] = None
) -> Optional[str]:
    """Raw Crawl-delay value for `agent`, if its group has one. Not interpreted."""
    group, _ = select_group(policy, agent, options)
    return group.crawl_delay if group else None
