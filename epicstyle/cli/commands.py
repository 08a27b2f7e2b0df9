"""
Command-line interface for epicstyle.

This module provides the `epicstyle` command: analyze C files and print a
report (terminal or JSON), or fix them in place (or as a dry run).
"""

import os
import sys
import json
import click
import logging
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape

from .. import __version__
from ..config import MAX_LEVEL, MIN_LEVEL, PROGRESS_BAR_WIDTH, SCORE_BANDS, SEVERITY_STYLES
from ..core.aggregator import Report, FileResult
from ..core.analyzer import StyleAnalyzer
from ..core.collector import InputPathError, collect_files
from ..core.fixer import AutoFixer, FixerError, FixOutcome
from ..core.rules import RULE_CATALOG, NOOP_RULES

console = Console()
err_console = Console(stderr=True)

# Configure logging
logging.basicConfig(level=logging.WARNING, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


@click.command()
@click.version_option(version=__version__)
@click.argument('target', required=False, type=click.Path())
@click.option('--path', 'path_option', type=click.Path(), help='Path to file or directory to analyze')
@click.option('--verbose', '-v', is_flag=True, envvar='EPICSTYLE_VERBOSE', help='Verbose output')
@click.option('--json', 'as_json', is_flag=True, help='JSON output format')
@click.option('--silent', is_flag=True, help='Silent mode (exit code only)')
@click.option('--level', type=click.IntRange(MIN_LEVEL, MAX_LEVEL), default=MIN_LEVEL, show_default=True,
              envvar='EPICSTYLE_LEVEL', help='Verification level (1=basic, 2=advanced)')
@click.option('--fix', is_flag=True, help='Automatically fix violations')
@click.option('--dry-run', is_flag=True, help='Show what would be fixed without applying changes')
@click.option('--levels', 'show_levels', is_flag=True, help='List the rules of each verification level')
def main(target, path_option, verbose, as_json, silent, level, fix, dry_run, show_levels):
    """epicstyle - check and fix C files against the Epitech coding style."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if show_levels:
        display_levels()
        return

    path = path_option or target
    if not path:
        click.echo(main.get_usage(click.get_current_context()), err=True)
        sys.exit(1)

    if fix or dry_run:
        run_fixer(AutoFixer(dry_run=dry_run), path, verbose, silent)
        return

    analyzer = StyleAnalyzer(level)
    try:
        report = analyzer.analyze_path(path)
    except InputPathError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    if silent:
        sys.exit(1 if report.has_violations else 0)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        display_report(report, verbose)

    if report.has_violations:
        sys.exit(1)


def display_levels():
    """Display the rule catalog grouped by verification level."""
    table = Table(title="Rules")
    table.add_column("Level", justify="center")
    table.add_column("Code", style="cyan")
    table.add_column("Name")
    table.add_column("Severity", justify="center")
    table.add_column("Description", style="dim")

    for rule in sorted(RULE_CATALOG, key=lambda r: r.level):
        name = rule.name if rule.code not in NOOP_RULES else f"{rule.name} (not checked)"
        style = SEVERITY_STYLES[rule.severity.value]
        table.add_row(
            str(rule.level),
            rule.code,
            name,
            f"[{style}]{rule.severity.value.upper()}[/{style}]",
            escape(rule.description)
        )

    console.print(table)
    for level in range(MIN_LEVEL, MAX_LEVEL + 1):
        count = sum(1 for r in RULE_CATALOG if r.level <= level)
        console.print(f"Level {level}: {count} rules")


def progress_bar(percentage: float, width: int = PROGRESS_BAR_WIDTH) -> str:
    """Render a percentage as a bar of full and empty blocks."""
    filled = int(percentage / 100 * width)
    filled = max(0, min(width, filled))
    return "[green]" + "█" * filled + "[/green]" + "░" * (width - filled)


def score_band(score: float):
    """Return the (style, message) pair for a project score."""
    for minimum, style, message in SCORE_BANDS:
        if score >= minimum:
            return style, message
    return SCORE_BANDS[-1][1], SCORE_BANDS[-1][2]


def display_report(report: Report, verbose: bool):
    """Display the analysis report in the terminal."""
    console.print(Panel("[bold]epicstyle - ANALYSIS REPORT[/bold]", border_style="blue"))

    summary_text = f"""
Files analyzed: {report.total_files}
Lines of code: {report.total_lines}
Total violations: {report.total_violations}
Clean files: {report.clean_files}/{report.total_files}
Cleanliness: {report.clean_percentage:.1f}% {progress_bar(report.clean_percentage)}
    """.strip()
    console.print(Panel(summary_text, title="Summary", border_style="blue"))

    if not report.files:
        console.print("[yellow]No C files found[/yellow]")

    for file_result in report.sorted_files():
        display_file_result(file_result, verbose)

    if verbose and report.has_violations:
        display_rule_breakdown(report)

    style, message = score_band(report.total_score)
    console.print(Panel(
        f"[{style}]TOTAL SCORE: {report.total_score:.1f}%[/{style}]\n"
        f"{progress_bar(report.total_score)}\n"
        f"{message}",
        title="Score",
        border_style=style
    ))


def display_file_result(file_result: FileResult, verbose: bool):
    filename = escape(file_result.filename)
    if file_result.is_clean:
        console.print(f"[green]✓ {filename}[/green] ({file_result.score:.1f}% - {file_result.line_count} lines)")
        return

    console.print(
        f"[red]✗ {filename}[/red] ({file_result.score:.1f}% - {file_result.line_count} lines"
        f" - {len(file_result.violations)} violations)"
    )

    if verbose:
        for v in file_result.violations:
            style = SEVERITY_STYLES[v.severity.value]
            console.print(
                f"    [{style}]{v.severity.value.upper()}[/{style}] Line {v.line}: "
                f"{v.rule} - {escape(v.message)}"
            )
            if v.description:
                console.print(f"         [dim]{escape(v.description)}[/dim]")


def display_rule_breakdown(report: Report):
    table = Table(title="Violations by rule")
    table.add_column("Rule", style="cyan")
    table.add_column("Count", justify="center")

    for code, count in report.rule_counts().items():
        table.add_row(code, str(count))

    console.print(table)


def run_fixer(fixer: AutoFixer, path: str, verbose: bool, silent: bool = False):
    """
    Fix every C file under path and print what was (or would be) done.

    In silent mode only errors are printed.
    """
    try:
        files = collect_files(path)
    except InputPathError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    if not files:
        if not silent:
            console.print("[yellow]No C files found to fix[/yellow]")
        return

    outcomes = fixer.fix_files(files)
    total_fixes = 0
    files_modified = 0

    for outcome in outcomes:
        if outcome.error:
            err_console.print(f"[red]Error fixing {escape(outcome.filepath)}: {escape(outcome.error)}[/red]")
            continue

        result = outcome.result
        if not result.fixes:
            continue

        total_fixes += len(result.fixes)
        if result.content_modified:
            files_modified += 1

        if not silent and (verbose or fixer.dry_run):
            display_fixes(outcome, fixer.dry_run)

        handle_rename(fixer, outcome, verbose and not silent)

    if silent:
        return

    console.print("\n[bold]Summary:[/bold]")
    console.print(f"  Files processed: {len(files)}")
    if fixer.dry_run:
        console.print(f"  Fixes available: {total_fixes}")
        if total_fixes > 0:
            console.print("\n[yellow]Run with --fix to apply these changes[/yellow]")
    else:
        console.print(f"  Files modified: {files_modified}")
        console.print(f"  Total fixes applied: {total_fixes}")
        if total_fixes > 0:
            console.print("\n[green]✓ Auto-fix complete[/green]")


def display_fixes(outcome: FixOutcome, dry_run: bool):
    mode = "Would fix" if dry_run else "Fixed"
    console.print(f"\n[blue]{escape(outcome.result.filename)}[/blue]")
    for fix in outcome.result.fixes:
        if fix.line > 0:
            console.print(f"  {mode} \\[{fix.rule}] Line {fix.line}: {escape(fix.description)}")
        else:
            console.print(f"  {mode} \\[{fix.rule}] {escape(fix.description)}")


def handle_rename(fixer: AutoFixer, outcome: FixOutcome, verbose: bool):
    result = outcome.result
    if not result.new_filename:
        return

    new_name = escape(os.path.basename(result.new_filename))
    if fixer.dry_run:
        if verbose:
            console.print(f"  Would rename: {escape(result.filename)} -> {new_name}")
        return

    try:
        fixer.apply_rename(outcome.filepath, result)
    except FixerError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        return

    if verbose:
        console.print(f"  Renamed: {escape(result.filename)} -> {new_name}")


if __name__ == '__main__':
    main()
