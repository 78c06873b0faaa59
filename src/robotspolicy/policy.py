import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .directives import Directive, DirectiveKind, tokenize
from .matching import normalize_pattern

log = logging.getLogger(__name__)

WILDCARD = "*"

_RULE_KINDS = (DirectiveKind.ALLOW, DirectiveKind.DISALLOW)


@dataclass(frozen=True)
class Rule:
    verdict: DirectiveKind
    pattern: str
    line: int = 0

    @property
    def allows(self) -> bool:
        return self.verdict is DirectiveKind.ALLOW


@dataclass(frozen=True)
class RuleGroup:
    agents: Tuple[str, ...]
    rules: Tuple[Rule, ...] = ()
    crawl_delays: Tuple[str, ...] = ()
    line: int = 0

    @property
    def is_wildcard(self) -> bool:
        return WILDCARD in self.agents

    @property
    def crawl_delay(self) -> Optional[str]:
        return self.crawl_delays[0] if self.crawl_delays else None


@dataclass(frozen=True)
class Policy:
    """Parsed robots.txt: agent groups in file order plus every Sitemap URL seen."""

    groups: Tuple[RuleGroup, ...] = ()
    sitemaps: Tuple[str, ...] = ()


@dataclass
class _PendingGroup:
    agents: List[str]
    line: int
    rules: List[Rule] = field(default_factory=list)
    crawl_delays: List[str] = field(default_factory=list)

    def close(self) -> RuleGroup:
        return RuleGroup(
            agents=tuple(self.agents),
            rules=tuple(self.rules),
            crawl_delays=tuple(self.crawl_delays),
            line=self.line,
        )


def group_directives(directives: List[Directive]) -> Policy:
    """
    Fold a directive stream into a Policy.

    Consecutive User-agent lines share one group; any other group directive
    ends the run, so the next User-agent starts a fresh group. Sitemap lines
    are global and never touch grouping. Rules seen before the first
    User-agent have no owner and are dropped.
    """
    groups: List[RuleGroup] = []
    sitemaps: List[str] = []
    pending: Optional[_PendingGroup] = None
    last_kind: Optional[DirectiveKind] = None

    for d in directives:
        if d.kind is DirectiveKind.UNKNOWN:
            continue

        if d.kind is DirectiveKind.SITEMAP:
            sitemaps.append(d.value)
            continue

        if d.kind is DirectiveKind.USER_AGENT:
            agent = d.value.lower()
            if pending is not None and last_kind is DirectiveKind.USER_AGENT:
                pending.agents.append(agent)
            else:
                if pending is not None:
                    groups.append(pending.close())
                pending = _PendingGroup(agents=[agent], line=d.line)
        elif pending is None:
            log.debug("line %d: %s outside any user-agent group; dropped", d.line, d.field)
        elif d.kind in _RULE_KINDS:
            pending.rules.append(Rule(d.kind, normalize_pattern(d.value), d.line))
        elif d.kind is DirectiveKind.CRAWL_DELAY:
            pending.crawl_delays.append(d.value)

        last_kind = d.kind

    if pending is not None:
        groups.append(pending.close())

    return Policy(groups=tuple(groups), sitemaps=tuple(sitemaps))


def parse(raw: Union[bytes, bytearray, str]) -> Policy:
    """Parse robots.txt bytes or text. Never fails on malformed content."""
    policy = group_directives(tokenize(raw))
    log.debug("parsed %d group(s), %d sitemap(s)", len(policy.groups), len(policy.sitemaps))
    return policy
