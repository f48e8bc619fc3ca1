"""Turborepo task delegation via ``pnpm turbo``."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from rich.markup import escape

from hive.utils import process


@dataclass
class TurboOptions:
    """Flags forwarded to ``turbo run``."""

    filter: str | None = None
    force: bool = False
    cache: bool = True
    concurrency: int | None = None
    parallel: bool = False
    continue_on_error: bool = False
    dry: bool | str = False  # True or "json"
    graph: bool = False
    output_logs: str | None = None
    extra: tuple[str, ...] = ()


def build_turbo_args(task: str, options: TurboOptions | None = None) -> list[str]:
    """Build the full ``pnpm turbo run <task>`` command line."""
    opts = options or TurboOptions()
    args = ["pnpm", "turbo", "run", task]

    if opts.filter:
        args.append(f"--filter={opts.filter}")
    if opts.force:
        args.append("--force")
    if not opts.cache:
        args.append("--no-cache")
    if opts.concurrency is not None:
        args.append(f"--concurrency={opts.concurrency}")
    if opts.parallel:
        args.append("--parallel")
    if opts.continue_on_error:
        args.append("--continue")
    if opts.dry == "json":
        args.append("--dry=json")
    elif opts.dry:
        args.append("--dry")
    if opts.graph:
        args.append("--graph")
    if opts.output_logs:
        args.append(f"--output-logs={opts.output_logs}")

    args.extend(opts.extra)
    return args


def run_turbo(
    root: Path,
    task: str,
    options: TurboOptions | None = None,
    *,
    env: dict[str, str] | None = None,
    capture: bool = False,
) -> int:
    """Run a turbo task at the monorepo root.

    Output streams to the terminal unless *capture* is set, in which case it
    is collected and only echoed in verbose mode (stdout stays free for
    ``--json``).
    """
    args = build_turbo_args(task, options)
    if not capture:
        return process.run_streaming(args, root, env=env)
    result = process.run(args, root, env=env)
    if process.verbose:
        for line in result.stdout.splitlines():
            process.console.print(f"  [dim]{escape(line)}[/dim]", highlight=False)
    return result.returncode


def turbo_version(root: Path) -> str | None:
    return process.output(["pnpm", "turbo", "--version"], root)


def has_turbo(root: Path) -> bool:
    return turbo_version(root) is not None
