"""Command line interface for filesync."""

import logging
from typing import Any, Optional

import click

from .exceptions import ConfigError, FileSyncError, SyncAbortedError
from .output import OutputFormatter
from .sources import open_source
from .sync import SyncEngine, SyncPair, load_sync_pairs_from_json
from .cli_progress import run_sync_with_progress

logger = logging.getLogger(__name__)


def _report_abort(out: OutputFormatter, error: SyncAbortedError) -> None:
    """Tell the user what was applied before a failed action."""
    out.error(f"Failed on '{error.path}': {error.error}")
    if error.synced_paths:
        out.warning(
            f"{len(error.synced_paths)} file(s) were synced before the failure:"
        )
        for path in error.synced_paths:
            out.print(f"  {path}")
    out.warning("The destination is consistent; run the sync again to finish.")


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="filesync")
@click.pass_context
def main(ctx: Any, quiet: bool, json: bool, verbose: bool) -> None:
    """filesync - one-way sync between local directories and S3.

    Locations are local directory paths or s3://bucket/prefix URLs.
    """
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    # Configure logging based on verbose flag
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("filesync").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.argument("source", type=str)
@click.argument("destination", type=str)
@click.option(
    "--delete",
    "delete_extraneous",
    is_flag=True,
    help="Delete destination files that do not exist on the source",
)
@click.option(
    "--dry-run", is_flag=True, help="Show what would be synced without syncing"
)
@click.option(
    "--checksum",
    is_flag=True,
    help="Always compare content hashes (do not trust size + modification time)",
)
@click.option(
    "--no-preserve-mtime",
    is_flag=True,
    help="Do not copy modification times to the destination",
)
@click.option(
    "--ignore",
    "-i",
    "ignore_patterns",
    multiple=True,
    help="Gitignore-style pattern to skip on a local source (repeatable)",
)
@click.option(
    "--exclude-dot-files",
    is_flag=True,
    help="Skip files and folders starting with a dot",
)
@click.option(
    "--no-progress",
    is_flag=True,
    help="Disable progress bars",
)
@click.pass_context
def sync(
    ctx: Any,
    source: str,
    destination: str,
    delete_extraneous: bool,
    dry_run: bool,
    checksum: bool,
    no_preserve_mtime: bool,
    ignore_patterns: tuple[str, ...],
    exclude_dot_files: bool,
    no_progress: bool,
) -> None:
    """Sync new and changed files from SOURCE to DESTINATION.

    The source is never modified. Re-running after a failure is always
    safe and only transfers what is still pending.

    Examples:
        filesync sync ./site s3://my-bucket/site          # Upload changes
        filesync sync ./site s3://my-bucket/site --delete # Mirror exactly
        filesync sync s3://my-bucket/backup ./restore     # Download
        filesync sync ./a ./b --dry-run                   # Preview changes
        filesync sync ./a ./b -i "*.tmp" -i "build/"      # Skip patterns
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        source_files = open_source(
            source,
            ignore_patterns=list(ignore_patterns),
            exclude_dot_files=exclude_dot_files,
        )
        destination_files = open_source(
            destination, missing_ok=True, use_ignore_files=False
        )

        engine = SyncEngine(out)
        report = run_sync_with_progress(
            engine,
            source_files,
            destination_files,
            delete_extraneous=delete_extraneous,
            dry_run=dry_run,
            trust_mtime=not checksum,
            preserve_mtime=not no_preserve_mtime,
            show_progress=not (no_progress or out.quiet or out.json_output),
        )

        if out.json_output:
            out.output_json(report.to_dict())

    except KeyboardInterrupt:
        out.warning("\nSync cancelled by user")
        ctx.exit(130)
    except SyncAbortedError as e:
        if out.json_output:
            out.output_json(
                {"error": str(e.error), "failed": e.path, "synced": e.synced_paths}
            )
        _report_abort(out, e)
        ctx.exit(1)
    except FileSyncError as e:
        out.error(str(e))
        ctx.exit(1)


@main.command(name="ls")
@click.argument("location", type=str)
@click.option(
    "--hashes",
    is_flag=True,
    help="Compute content hashes for local files",
)
@click.pass_context
def list_files(ctx: Any, location: str, hashes: bool) -> None:
    """List the files of LOCATION as filesync sees them.

    Examples:
        filesync ls ./site
        filesync ls s3://my-bucket/site --json
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        files = open_source(location, compute_hashes=hashes)
        entries = files.list_files()
    except FileSyncError as e:
        out.error(str(e))
        ctx.exit(1)
        return  # Unreachable, but helps type checker

    out.output_entries(entries)
    if not out.json_output:
        out.info(f"{len(entries)} file(s)")


@main.command()
@click.argument("config_file", type=click.Path(dir_okay=False), required=False)
@click.option(
    "--pair",
    "-p",
    "pair_literals",
    multiple=True,
    help="Sync pair SOURCE::DESTINATION or SOURCE::mirror::DESTINATION (repeatable)",
)
@click.option(
    "--dry-run", is_flag=True, help="Show what would be synced without syncing"
)
@click.option(
    "--no-preserve-mtime",
    is_flag=True,
    help="Do not copy modification times to the destination",
)
@click.pass_context
def run(
    ctx: Any,
    config_file: Optional[str],
    pair_literals: tuple[str, ...],
    dry_run: bool,
    no_preserve_mtime: bool,
) -> None:
    """Sync every pair from a JSON CONFIG_FILE and/or given with --pair.

    Pairs are processed in order (file pairs first); the first failing pair
    stops the run. The middle part of a --pair literal selects the mode:
    "update" (the default) copies new and changed files, "mirror" also
    deletes extraneous destination files.

    Example file:

    \b
        [
          {"source": "./docs", "destination": "s3://bucket/docs",
           "deleteExtraneous": true, "ignore": ["*.tmp"]}
        ]

    Examples:
        filesync run pairs.json
        filesync run -p "./site::mirror::s3://my-bucket/site"
    """
    out: OutputFormatter = ctx.obj["out"]

    if not config_file and not pair_literals:
        out.error("Give a CONFIG_FILE or at least one --pair")
        ctx.exit(1)
        return  # Unreachable, but helps type checker

    try:
        pairs = load_sync_pairs_from_json(config_file) if config_file else []
        pairs.extend(SyncPair.parse_literal(literal) for literal in pair_literals)
    except ConfigError as e:
        out.error(str(e))
        ctx.exit(1)
        return  # Unreachable, but helps type checker

    engine = SyncEngine(out)
    results = {}
    try:
        for pair in pairs:
            out.info(f"[bold]{pair.name}[/bold]")
            report = engine.sync_pair(
                pair,
                dry_run=dry_run,
                preserve_mtime=not no_preserve_mtime,
            )
            results[pair.name] = report.to_dict()
            out.print("")
    except KeyboardInterrupt:
        out.warning("\nSync cancelled by user")
        ctx.exit(130)
    except SyncAbortedError as e:
        _report_abort(out, e)
        ctx.exit(1)
    except FileSyncError as e:
        out.error(str(e))
        ctx.exit(1)

    if out.json_output:
        out.output_json(results)


if __name__ == "__main__":
    main()
