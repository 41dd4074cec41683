#!/usr/bin/env python3
"""
disk-guardian - Main Entry Point
Disk usage analysis and aged temp-file cleanup from the command line.
"""

import json
import logging
import os
import sys
import time
from typing import List, Optional

import click
from colorama import Fore, Style, init
from tqdm import tqdm

from config import Config
from delete_ops import CleanupSession, CleanupState
from errors import DiskGuardianError
from models import FileObservation, Report, ScanPolicy
from report import build_report
from scanner import scan
from utils import calculate_percentage, format_bytes, get_drive_usage, get_time_ago_days

# Initialize colorama for cross-platform colored output
init()

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def prompt_confirmation(text: str) -> str:
    """Reads a single answer from the terminal; aborted input counts as empty."""
    try:
        answer = click.prompt(f"{Fore.RED}{text}{Style.RESET_ALL}",
                              default="", show_default=False, prompt_suffix="")
    except click.Abort:
        click.echo()
        return ""
    return answer.strip()


def fail(message: str):
    click.echo(f"{Fore.RED}❌ Error: {message}{Style.RESET_ALL}", err=True)
    sys.exit(1)


# --- Rendering ---

def display_report(report: Report, preview_limit: int):
    click.echo(f"\n{Fore.CYAN}📊 DISK ANALYSIS REPORT{Style.RESET_ALL}")
    click.echo("-" * 50)
    click.echo(f"Total Files: {report.file_count:,}")
    click.echo(f"Total Size:  {format_bytes(report.total_size_bytes)}\n")

    click.echo(f"{Style.BRIGHT}Top File Types by Size:{Style.RESET_ALL}")
    for i, (ext, size) in enumerate(report.top_types_by_size, 1):
        percent = report.percent_of_total(size)
        click.echo(f"  {i}. {ext:<15} {format_bytes(size):<12} {percent:.1f}%")

    click.echo(f"\n{Style.BRIGHT}Largest Files:{Style.RESET_ALL}")
    if not report.top_findings_by_size:
        click.echo("  (none above the size threshold)")
    for i, obs in enumerate(report.top_findings_by_size[:preview_limit], 1):
        click.echo(f"  {i}. {format_bytes(obs.size_bytes):<12} {obs.path}")

    if report.skipped_count:
        click.echo(f"\n{Fore.YELLOW}⚠ {report.skipped_count} entries could not be read{Style.RESET_ALL}")


def display_findings(findings: List[FileObservation], preview_limit: int):
    for obs in findings[:preview_limit]:
        age = get_time_ago_days(obs.modified_at)
        click.echo(f"  {format_bytes(obs.size_bytes):<12} {age:>5}d  {obs.path}")
    if len(findings) > preview_limit:
        click.echo(f"  ... and {len(findings) - preview_limit} more")


class DeleteProgress:
    """tqdm bar that only appears once deletion actually starts."""

    def __init__(self, total: int):
        self.total = total
        self.bar: Optional[tqdm] = None

    def __call__(self, path: str, is_error: bool, message: str):
        if self.bar is None:
            self.bar = tqdm(total=self.total, desc="Deleting", unit="item", disable=None)
        if is_error:
            self.bar.write(f"{Fore.YELLOW}⚠ {message}{Style.RESET_ALL}")
        self.bar.update(1)

    def close(self):
        if self.bar is not None:
            self.bar.close()


# --- Commands ---

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(VERSION, prog_name="disk-guardian")
@click.option('--verbose', '-v', is_flag=True, help='Verbose (debug) logging')
@click.pass_context
def cli(ctx, verbose):
    """
    disk-guardian - disk usage inventory and temp-file cleanup.
    """
    setup_logging(verbose)
    ctx.obj = Config(verbose=verbose)


@cli.command()
@click.argument('path', required=False)
@click.option('--depth', '-d', type=click.IntRange(min=0), default=None,
              help='Max directory depth for analysis (default: 5)')
@click.option('--min-size', 'min_size_mb', type=click.IntRange(min=0), default=None,
              help='Minimum file size in MB for the large file report (default: 10)')
@click.option('--top', type=click.IntRange(min=0), default=None,
              help='How many large files to rank (default: 20)')
@click.option('--format', 'output_format', type=click.Choice(['text', 'json'], case_sensitive=False),
              default='text', help='Output format')
@click.option('--follow-symlinks', is_flag=True, help='Follow symbolic links')
@click.pass_obj
def analyze(config: Config, path, depth, min_size_mb, top, output_format, follow_symlinks):
    """Analyze disk usage in PATH (default: current directory)."""
    target = path or os.getcwd()
    if not os.path.exists(target):
        fail(f"Path does not exist: {target}")

    if depth is not None:
        config.max_depth = depth
    if min_size_mb is not None:
        config.min_size_mb = min_size_mb
    if top is not None:
        config.top_findings_limit = top
    config.follow_symlinks = follow_symlinks

    as_json = output_format.lower() == 'json'
    policy = ScanPolicy.inventory(
        max_depth=config.max_depth,
        min_size_bytes=config.min_size_bytes,
        follow_symlinks=config.follow_symlinks,
    )

    if not as_json:
        click.echo(f"{Fore.GREEN}🚀 Analyzing: {target}{Style.RESET_ALL}")
        click.echo("This may take a while for large directories...")

    try:
        with tqdm(desc="Scanning", unit=" dirs", disable=True if as_json else None, leave=False) as bar:
            accumulator = scan(target, policy, on_progress=lambda _path: bar.update(1))
    except DiskGuardianError as e:
        fail(str(e))
    except KeyboardInterrupt:
        click.echo(f"\n{Fore.YELLOW}⏹️  Scan interrupted by user.{Style.RESET_ALL}")
        sys.exit(1)

    report = build_report(accumulator, config.top_types_limit, config.top_findings_limit)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        display_report(report, config.preview_limit)


@cli.command()
@click.argument('days', required=False, type=click.IntRange(min=0))
@click.option('--path', '-p', 'paths', multiple=True,
              help='Directory to clean (repeatable; default: system temp dirs)')
@click.option('--dry-run', is_flag=True, help='Preview changes without deleting')
@click.option('--trash', is_flag=True, help='Send items to the trash instead of deleting them')
@click.option('--accept-phrase', default=None,
              help="Answer required to confirm deletion (default: 'yes')")
@click.pass_obj
def clean(config: Config, days, paths, dry_run, trash, accept_phrase):
    """Find and clean temp files older than DAYS (default: 7)."""
    if days is not None:
        config.days_old = days
    if paths:
        config.temp_dirs = list(paths)
    if accept_phrase:
        config.accept_phrase = accept_phrase
    config.use_trash = trash

    policy = ScanPolicy.cleanup(
        max_age_seconds=config.max_age_seconds,
        follow_symlinks=config.follow_symlinks,
        reference_time=time.time(),
    )

    click.echo(f"\nScanning for files older than {config.days_old} days...\n")
    logger.debug("Cleanup roots: %s", config.temp_dirs)

    findings: List[FileObservation] = []
    for root in config.temp_dirs:
        click.echo(f"Checking: {root}")
        if not os.path.exists(root):
            click.echo(f"  {Fore.YELLOW}⚠ Cannot access: path does not exist{Style.RESET_ALL}")
            continue
        try:
            accumulator = scan(root, policy)
        except DiskGuardianError as e:
            click.echo(f"  {Fore.YELLOW}⚠ {e}{Style.RESET_ALL}")
            continue
        for skipped in accumulator.skipped:
            if skipped.stage == "list":
                click.echo(f"  {Fore.YELLOW}⚠ Cannot access {skipped.path}: {skipped.reason}{Style.RESET_ALL}")
        findings.extend(accumulator.candidate_findings)

    if not findings:
        click.echo(f"\n{Fore.GREEN}✓ No old temporary files found.{Style.RESET_ALL}")
        return

    total_size = sum(f.size_bytes for f in findings)
    click.echo(f"\n{Style.BRIGHT}Found {len(findings)} items ({format_bytes(total_size)}){Style.RESET_ALL}")

    if dry_run:
        click.echo(f"\n{Fore.YELLOW}[DRY RUN] No files will be deleted{Style.RESET_ALL}\n")
        display_findings(findings, config.preview_limit)

    progress = DeleteProgress(len(findings))
    session = CleanupSession(
        findings,
        prompt_confirmation,
        dry_run=dry_run,
        use_trash=config.use_trash,
        accept_phrase=config.accept_phrase,
        progress_callback=progress,
    )
    try:
        outcome = session.run()
    finally:
        progress.close()

    if session.state is CleanupState.DECLINED:
        click.echo("Cancelled.")
        return
    if session.state is not CleanupState.DONE:
        return

    drive_total, _, _ = get_drive_usage(config.temp_dirs[0])
    freed_percent = calculate_percentage(outcome.freed_bytes, drive_total)
    click.echo(f"\n{Fore.GREEN}✓ Cleaned up {format_bytes(outcome.freed_bytes)} "
               f"({outcome.deleted_count} items, {freed_percent:.2f}% of drive){Style.RESET_ALL}")

    if outcome.error_count:
        click.echo(f"{Fore.YELLOW}⚠ {outcome.error_count} items could not be deleted{Style.RESET_ALL}")
        for message in outcome.errors[:5]:
            click.echo(f"  {message}")
        if len(outcome.errors) > 5:
            click.echo(f"  ...and {len(outcome.errors) - 5} more.")


if __name__ == "__main__":
    cli()
