import click
import logging
from pathlib import Path
from typing import Optional, Tuple

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .evaluator import DuplicateAgents, EvaluatorOptions, TieBreak, explain, select_group
from .policy import Policy, parse

console = Console()


def load_policy(path: str) -> Policy:
    return parse(Path(path).read_bytes())


def enable_debug_logging() -> None:
    """Send this package's debug records to stderr, even if logging is already configured."""
    logger = logging.getLogger("robotspolicy")
    for h in [h for h in logger.handlers if isinstance(h, RichHandler)]:
        logger.removeHandler(h)
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


@click.group(help="robotspolicy - parse robots.txt files and check crawl permissions")
@click.option("--verbose", "-v", is_flag=True, help="Log ignored lines and parse details")
@click.option(
    "--tie-break",
    type=click.Choice([t.value for t in TieBreak]),
    default=TieBreak.ALLOW.value,
    show_default=True,
    envvar="ROBOTSPOLICY_TIE_BREAK",
    help="Verdict when equally long rules disagree",
)
@click.option(
    "--duplicate-agents",
    type=click.Choice([d.value for d in DuplicateAgents]),
    default=DuplicateAgents.FIRST.value,
    show_default=True,
    envvar="ROBOTSPOLICY_DUPLICATE_AGENTS",
    help="Use the first group for a repeated agent name, or merge them",
)
@click.pass_context
def app(ctx: click.Context, verbose: bool, tie_break: str, duplicate_agents: str):
    if verbose:
        enable_debug_logging()
    ctx.obj = EvaluatorOptions(
        tie_break=TieBreak(tie_break), duplicate_agents=DuplicateAgents(duplicate_agents)
    )


@app.command("check")
@click.argument("robots_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("paths", nargs=-1, required=True)
@click.option("--agent", "-a", default="*", show_default=True, help="Crawler user-agent name")
@click.option("--explain", "show_rule", is_flag=True, help="Show the rule that decided each path")
@click.option("--strict", is_flag=True, help="Exit with status 1 if any path is disallowed")
@click.pass_obj
def check(
    options: EvaluatorOptions,
    robots_file: str,
    paths: Tuple[str, ...],
    agent: str,
    show_rule: bool,
    strict: bool,
):
    """Check whether AGENT may fetch each PATH."""
    policy = load_policy(robots_file)
    blocked = 0
    for p in paths:
        d = explain(policy, agent, p, options)
        if d.allowed:
            console.print(f"[green]allowed[/]    {escape(p)}", highlight=False)
        else:
            blocked += 1
            console.print(f"[red]disallowed[/] {escape(p)}", highlight=False)
        if show_rule:
            if d.rule is None:
                reason = "no matching rule" if d.group_agent else "no group for agent"
                console.print(f"  {reason}", highlight=False)
            else:
                console.print(
                    f"  {d.rule.verdict.value}: {escape(d.rule.pattern)} "
                    f"(line {d.rule.line}, group '{escape(d.group_agent)}')",
                    highlight=False,
                )
    if strict and blocked:
        raise SystemExit(1)


@app.command("groups")
@click.argument("robots_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--agent", "-a", default=None, help="Only show the group selected for this agent")
@click.pass_obj
def groups(options: EvaluatorOptions, robots_file: str, agent: Optional[str]):
    """List user-agent groups."""
    policy = load_policy(robots_file)
    if agent is not None:
        group, _ = select_group(policy, agent, options)
        selected = [group] if group else []
    else:
        selected = list(policy.groups)
    if not selected:
        console.print("[yellow]No groups: every path is allowed.[/]")
        return
    for g in selected:
        delay = f", crawl-delay {escape(g.crawl_delay)}" if g.crawl_delay is not None else ""
        console.print(
            f"[bold]{escape(', '.join(g.agents))}[/] (line {g.line}): {len(g.rules)} rule(s){delay}",
            highlight=False,
        )
        for r in g.rules:
            console.print(f"- {r.verdict.value}: {escape(r.pattern) or '(empty)'}", highlight=False)


@app.command("sitemaps")
@click.argument("robots_file", type=click.Path(exists=True, dir_okay=False))
def sitemaps(robots_file: str):
    """Print Sitemap URLs in file order."""
    policy = load_policy(robots_file)
    for url in policy.sitemaps:
        console.print(url, markup=False, highlight=False, soft_wrap=True)


if __name__ == "__main__":
    app()
