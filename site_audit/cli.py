#!/usr/bin/env python3
"""
Command line entry point for the SiteAudit crawler.

Commands:
  run       Crawl the site and export the link graph
  config    Show the effective configuration

Global options:
  --config PATH       YAML/JSON config file (default: configs/default.yaml if present)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)   [env AUDIT_LOG_LEVEL]
  --log-file PATH     Log file (stdout only when omitted)
  --log-format FORMAT Log format string

run options (each also read from the AUDIT_* variable shown in --help):
  --start-url URL, --agent NAME, --valid-schemes LIST, --respect-robots BOOL,
  --max-workers N, --max-depth N, --timeout SEC
  --out DIR           Directory for graph.dot (default: out)
  --json PATH         Also write the graph as JSON
  --crawl-timeout SEC Stop the crawl gracefully after SEC seconds

Example:
  site-audit run --start-url https://example.com --max-depth 3 --json out/graph.json
"""
import sys
from functools import partial
from pathlib import Path

import click
from pydantic import ValidationError

from site_audit import __version__
from site_audit.config import AuditConfig, load_config
from site_audit.engine import Engine
from site_audit.errors import AuditError
from site_audit.logger import DEFAULT_FORMAT, configure
from site_audit.report.dot_report import render_dot
from site_audit.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def apply_overrides(cfg: AuditConfig, **overrides) -> AuditConfig:
    """Return *cfg* with every non-None override applied and re-validated."""
    changes = {k: v for k, v in overrides.items() if v is not None}
    if not changes:
        return cfg
    return AuditConfig(**{**cfg.model_dump(), **changes})


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteAudit, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to a YAML or JSON config file.'
)
@click.option(
    '--log-level', 'log_level',
    default=None, envvar='AUDIT_LOG_LEVEL', show_envvar=True,
    help='Logging level (DEBUG, INFO, WARNING, ERROR)'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file (stdout when omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Format string for log records'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """SiteAudit: map the link structure of a website."""
    try:
        cfg = load_config(config_path)
        cfg = apply_overrides(cfg, log_level=log_level)
    except (OSError, ValueError, TypeError) as e:
        print_error(f'Error loading configuration: {e}')
    configure(
        level=cfg.log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('run', context_settings=CONTEXT_SETTINGS)
@click.option('--start-url', envvar='AUDIT_START_URL', show_envvar=True, default=None,
              help='Seed URL, including scheme')
@click.option('--agent', envvar='AUDIT_AGENT', show_envvar=True, default=None,
              help='User-Agent and robots.txt agent name')
@click.option('--valid-schemes', envvar='AUDIT_VALID_SCHEMES', show_envvar=True, default=None,
              help='Comma-separated schemes to follow')
@click.option('--respect-robots', envvar='AUDIT_RESPECT_ROBOTS', show_envvar=True, default=None,
              type=click.BOOL, help='Fetch and honour robots.txt (true/false)')
@click.option('--max-workers', envvar='AUDIT_MAX_WORKERS', show_envvar=True, default=None,
              type=int, help='Number of concurrent workers')
@click.option('--max-depth', envvar='AUDIT_MAX_DEPTH', show_envvar=True, default=None,
              type=int, help='Link hops to follow from the seed')
@click.option('--timeout', envvar='AUDIT_TIMEOUT', show_envvar=True, default=None,
              type=float, help='Per-request timeout (seconds)')
@click.option(
    '--out', '-o', 'out_dir',
    default='out',
    show_default=True,
    type=click.Path(file_okay=False, path_type=Path),
    help='Directory for graph.dot'
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Also save the graph as JSON'
)
@click.option(
    '--crawl-timeout', 'crawl_timeout',
    type=float,
    default=None,
    help='Stop the crawl gracefully after this many seconds'
)
@click.pass_context
def run(ctx, start_url, agent, valid_schemes, respect_robots, max_workers, max_depth, timeout,
        out_dir, json_output, crawl_timeout):
    """Crawl the site and export the link graph."""
    try:
        cfg = apply_overrides(
            ctx.obj['config'],
            start_url=start_url,
            agent=agent,
            valid_schemes=valid_schemes,
            respect_robots=respect_robots,
            max_workers=max_workers,
            max_depth=max_depth,
            timeout=timeout,
        )
    except ValidationError as e:
        print_error(f'Invalid configuration: {e}')

    exporters = [partial(render_dot, output_dir=out_dir)]
    if json_output:
        exporters.append(partial(render_json, output_path=json_output))

    click.echo(f'Starting audit of {cfg.start_url}')
    try:
        audit = Engine(cfg).run(exporters, crawl_timeout=crawl_timeout)
    except AuditError as e:
        print_error(f'Audit failed: {e}')

    click.echo(
        f'Visited {len(audit.visited)} urls; graph has {len(audit.graph)} nodes '
        f'and {audit.graph.edge_count} edges'
    )
    click.echo(f'DOT graph: {out_dir / "graph.dot"}')
    if json_output:
        click.echo(f'JSON graph: {json_output}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
