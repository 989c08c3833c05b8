"""
aws-converge CLI

Main entry point for the command-line interface.
"""

import json
import sys
from typing import Dict, List, Optional, Tuple

import click
from botocore.exceptions import BotoCoreError, ClientError
from rich.console import Console
from rich.prompt import Confirm

from . import __version__
from .core.aws_client import AWSClient
from .core.base_tagger import SyncResult
from .core.exceptions import (
    AWSClientError,
    ConvergeError,
    PollCancelledError,
    PollTimeoutError,
)
from .core.logging import setup_logging
from .core.poller import ConvergencePoller, PollPolicy, PollResult
from .core.sync_manager import BatchSyncResult, SyncJob, SyncManager
from .core.tags import diff
from .reporters.cli_reporter import CLIReporter
from .reporters.json_reporter import JSONReporter
from .taggers import TAGGERS, get_tagger
from .waiters.conditions import WAITERS

EXIT_ERROR = 1
EXIT_TIMEOUT = 2
EXIT_CANCELLED = 130

console = Console()


def parse_tags(ctx, param, value: Tuple[str, ...]) -> Dict[str, str]:
    """Parse repeated KEY=VALUE options into a tag mapping."""
    tags = {}
    for item in value:
        key, sep, tag_value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected KEY=VALUE, got '{item}'")
        tags[key] = tag_value
    return tags


def load_json(path: str, expected: type, label: str):
    """Load a JSON file and check its top-level type."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"{label} is not valid JSON: {e}")
    if not isinstance(data, expected):
        raise click.BadParameter(f"{label} must contain a JSON {expected.__name__}")
    return data


def region_option(f):
    return click.option(
        "--region",
        "-r",
        default="us-east-1",
        envvar="AWS_DEFAULT_REGION",
        show_default=True,
        help="AWS region",
    )(f)


def profile_option(f):
    return click.option(
        "--profile",
        "-p",
        default=None,
        envvar="AWS_PROFILE",
        help="AWS profile name from ~/.aws/credentials",
    )(f)


def format_option(f):
    return click.option(
        "--format",
        "-f",
        "output_format",
        type=click.Choice(["cli", "json"]),
        default="cli",
        help="Output format (default: cli)",
    )(f)


def _emit(result, output_format: str, output: Optional[str] = None) -> None:
    """Render a result in the requested format."""
    if output_format == "json":
        reporter = JSONReporter(output_path=output)
        if output:
            path = reporter.report(result)
            console.print(f"[dim]Results saved to: {path}[/dim]")
        else:
            click.echo(reporter.to_string(result))
        return

    cli_reporter = CLIReporter(console)
    if isinstance(result, BatchSyncResult):
        cli_reporter.report_batch(result)
    elif isinstance(result, SyncResult):
        cli_reporter.report_sync(result)
    else:
        cli_reporter.report_delta(result)


@click.group()
@click.version_option(version=__version__, prog_name="aws-converge")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Logging level (default: WARNING)",
)
@click.option("--log-file", default=None, help="Also write logs to this file")
def cli(log_level: str, log_file: Optional[str]):
    """
    aws-converge: converge AWS resource tags and wait for AWS operations.
    """
    setup_logging(level=log_level, log_file=log_file)


@cli.group()
def tags():
    """Plan and apply tag changes."""
    pass


@tags.command("diff")
@click.option(
    "--desired",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with the desired tags",
)
@click.option(
    "--current",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with the currently applied tags",
)
@format_option
def diff_tags(desired: str, current: str, output_format: str):
    """
    Show the remove/add plan between two tag files, without calling AWS.

    Examples:

        aws-converge tags diff --desired desired.json --current current.json
    """
    desired_tags = load_json(desired, dict, "--desired")
    current_tags = load_json(current, dict, "--current")

    try:
        delta = diff(desired_tags, current_tags)
    except ConvergeError as e:
        console.print(f"\n[red bold]Error:[/red bold] {e}")
        sys.exit(EXIT_ERROR)

    _emit(delta, output_format)


@tags.command("sync")
@click.argument("resource_type", type=click.Choice(sorted(TAGGERS)))
@click.argument("resource_id")
@click.option(
    "--tag",
    "-t",
    "desired",
    multiple=True,
    callback=parse_tags,
    help="Desired tag as KEY=VALUE (repeatable)",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Preview the plan without changing tags",
)
@region_option
@profile_option
@format_option
def sync_tags(
    resource_type: str,
    resource_id: str,
    desired: Dict[str, str],
    dry_run: bool,
    region: str,
    profile: Optional[str],
    output_format: str,
):
    """
    Converge the tags of one resource to the given set.

    Tags not listed with --tag are removed (AWS-managed aws: tags are
    never touched).

    Examples:

        aws-converge tags sync ec2_resource vpc-0abc -t Name=core -t Env=prod

        aws-converge tags sync acm_certificate arn:aws:acm:... -t Env=prod --dry-run
    """
    try:
        client = AWSClient(region=region, profile=profile)
        result = get_tagger(resource_type, client).sync(
            resource_id, desired, dry_run=dry_run
        )
    except (ConvergeError, BotoCoreError) as e:
        console.print(f"\n[red bold]Error:[/red bold] {e}")
        sys.exit(EXIT_ERROR)

    _emit(result, output_format)


@tags.command("apply")
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False))
@click.option("--dry-run", is_flag=True, default=False, help="Only compute plans")
@click.option(
    "--max-workers",
    default=10,
    type=int,
    help="Maximum parallel syncs (default: 10)",
)
@click.option("--output", "-o", default=None, help="Write the JSON report here")
@region_option
@profile_option
@format_option
def apply_manifest(
    manifest: str,
    dry_run: bool,
    max_workers: int,
    output: Optional[str],
    region: str,
    profile: Optional[str],
    output_format: str,
):
    """
    Converge tags for every resource listed in a JSON manifest.

    The manifest is a list of objects with resource_type, resource_id,
    tags and an optional region.

    Examples:

        aws-converge tags apply resources.json --max-workers 4
    """
    entries: List[dict] = load_json(manifest, list, "MANIFEST")
    try:
        jobs = [SyncJob.from_dict(entry) for entry in entries]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise click.BadParameter(f"Invalid manifest entry: {e}")

    finished = 0

    def progress_callback(job: SyncJob, status: str):
        nonlocal finished
        finished += 1
        where = f" ({job.region})" if job.region else ""
        if status == "complete":
            console.print(
                f"  [dim]Synced: {job.resource_id}{where} ({finished}/{len(jobs)})[/dim]"
            )
        elif status == "error":
            console.print(f"  [yellow]Failed: {job.resource_id}{where}[/yellow]")

    try:
        manager = SyncManager(region=region, profile=profile, max_workers=max_workers)
        batch = manager.sync_many(
            jobs, dry_run=dry_run, progress_callback=progress_callback
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Sync cancelled by user.[/yellow]")
        sys.exit(EXIT_CANCELLED)

    _emit(batch, output_format, output)

    if batch.has_errors:
        sys.exit(EXIT_ERROR)


def _wait_with_prompt(
    poller: ConvergencePoller,
    condition,
    policy: PollPolicy,
    description: str,
) -> PollResult:
    """Wait, offering to start another wait on timeout when prompting is enabled."""
    while True:
        try:
            with CLIReporter(console).create_progress() as progress:
                progress.add_task(f"Waiting for {description}...", total=None)
                return poller.wait(condition, policy, description=description)
        except PollTimeoutError:
            if policy.prompt_on_timeout and Confirm.ask(
                f"[yellow]{description} has not converged. Keep waiting?[/yellow]",
                default=False,
            ):
                continue
            raise


@cli.command("wait")
@click.argument("waiter", type=click.Choice(sorted(WAITERS)))
@click.argument("resource_id")
@click.option(
    "--max-wait",
    type=float,
    default=None,
    help="Maximum seconds to wait (default depends on the waiter)",
)
@click.option(
    "--interval",
    type=float,
    default=None,
    help="Seconds between checks (default depends on the waiter)",
)
@click.option(
    "--prompt/--no-prompt",
    default=False,
    help="Ask whether to keep waiting after a timeout",
)
@region_option
@profile_option
@format_option
def wait(
    waiter: str,
    resource_id: str,
    max_wait: Optional[float],
    interval: Optional[float],
    prompt: bool,
    region: str,
    profile: Optional[str],
    output_format: str,
):
    """
    Block until an asynchronous AWS operation has converged.

    Exit codes: 0 converged, 1 failed, 2 timed out, 130 cancelled.

    Examples:

        aws-converge wait certificate-issued arn:aws:acm:us-east-1:...

        aws-converge wait elasticsearch-domain-ready logs --max-wait 3600 --prompt
    """
    spec = WAITERS[waiter]

    try:
        policy = PollPolicy(
            max_wait=spec.policy.max_wait if max_wait is None else max_wait,
            interval=spec.policy.interval if interval is None else interval,
            prompt_on_timeout=prompt,
        )
    except ValueError as e:
        raise click.BadParameter(str(e))

    description = f"{waiter} {resource_id}"

    try:
        client = AWSClient(region=region, profile=profile)
        condition = spec.builder(spec.client_for(client), resource_id)
        poller = ConvergencePoller(is_transient=spec.is_transient())
        result = _wait_with_prompt(poller, condition, policy, description)

    except PollTimeoutError as e:
        console.print(f"\n[yellow bold]Timed out:[/yellow bold] {e.message}")
        sys.exit(EXIT_TIMEOUT)
    except (PollCancelledError, KeyboardInterrupt):
        console.print("\n[yellow]Wait cancelled by user.[/yellow]")
        sys.exit(EXIT_CANCELLED)
    except (ConvergeError, ClientError, BotoCoreError) as e:
        console.print(f"\n[red bold]Error:[/red bold] {e}")
        sys.exit(EXIT_ERROR)

    if output_format == "json":
        click.echo(JSONReporter().to_string(result))
    else:
        CLIReporter(console).report_poll(result)


@cli.command("validate")
@profile_option
@region_option
def validate_credentials(profile: Optional[str], region: str):
    """Validate AWS credentials and show account info."""
    try:
        client = AWSClient(region=region, profile=profile)
        client.validate_credentials()
        account_id = client.get_account_id()

        console.print("\n[green bold]AWS credentials are valid![/green bold]")
        console.print(f"\n  Account ID: {account_id}")
        console.print(f"  Region: {region}")
        if profile:
            console.print(f"  Profile: {profile}")
        console.print()

    except AWSClientError as e:
        console.print(f"\n[red bold]Validation Failed:[/red bold] {e}")
        sys.exit(EXIT_ERROR)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
