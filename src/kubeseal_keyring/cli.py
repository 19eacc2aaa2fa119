#!/usr/bin/env python
"""Command-line interface for kubeseal-keyring.

This module provides the CLI entry point, parsing the command-line
arguments and dispatching to the key lifecycle procedures.
"""

import sys
from collections.abc import Callable

import click
from icecream import ic

from kubeseal_keyring import __version__, console
from kubeseal_keyring.config import Settings
from kubeseal_keyring.core.keyring import Keyring
from kubeseal_keyring.exceptions import KeyringError, OperationCancelled
from kubeseal_keyring.procedures.recovery import build_request


def run_operation(settings: Settings, operation: Callable[[Keyring], object]) -> None:
    """Run an operation against a Keyring, mapping failures to exit codes.

    Cancellation exits with 0, every KeyringError with 1.

    Args:
        settings: Resolved settings.
        operation: Callable receiving the Keyring.

    """
    try:
        with Keyring(settings) as keyring:
            ic(keyring)
            operation(keyring)
    except OperationCancelled:
        console.info("Operation cancelled.")
    except KeyringError as e:
        console.error(str(e))
        sys.exit(1)


@click.group(
    help="Manage the Sealed Secrets master key stored in AWS Secrets Manager",
    invoke_without_command=True,
)
@click.option("--version", "-v", required=False, is_flag=True, help="print version")
@click.option("--debug", required=False, is_flag=True, help="print debug information")
@click.option("--secret-name", required=False, help="Secrets Manager id of the master key")
@click.option("--backup-secret-name", required=False, help="Secrets Manager id holding archived keys")
@click.option(
    "--backup-dir",
    required=False,
    type=click.Path(file_okay=False),
    help="directory for local backups and logs",
)
@click.option("--region", required=False, help="AWS region")
@click.option("--profile", required=False, help="AWS profile")
@click.pass_context
def cli(
    ctx: click.Context,
    version: bool,
    debug: bool,
    secret_name: str | None,
    backup_secret_name: str | None,
    backup_dir: str | None,
    region: str | None,
    profile: str | None,
) -> None:
    """Resolve settings shared by every command.

    Args:
        ctx: Click context; resolved Settings are stored in ``ctx.obj``.
        version: Print version and exit.
        debug: Enable debug output.
        secret_name: Override of the master key secret id.
        backup_secret_name: Override of the backup secret id.
        backup_dir: Override of the local backup directory.
        region: AWS region override.
        profile: AWS profile override.

    """
    if not debug:
        ic.disable()

    if version:
        click.echo(__version__)
        ctx.exit(0)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        return

    try:
        settings = Settings.from_env().replace(
            secret_name=secret_name,
            backup_secret_name=backup_secret_name,
            backup_dir=backup_dir,
            region=region,
            profile=profile,
        )
    except KeyringError as e:
        console.error(str(e))
        sys.exit(1)

    ic(settings)
    ctx.obj = settings


@cli.command(help="Generate a new master key and store it in AWS Secrets Manager")
@click.pass_obj
def setup(settings: Settings) -> None:
    """Run the initial setup procedure."""
    run_operation(settings, lambda keyring: keyring.setup())


@cli.command(help="Back up the current master key locally, to the backup secret and to S3")
@click.option("--encrypt/--no-encrypt", default=None, help="encrypt the local backup files")
@click.option("--upload-to-s3/--no-upload-to-s3", default=None, help="upload the backup files to S3")
@click.option(
    "--to-aws-backup/--no-to-aws-backup",
    default=None,
    help="archive the key as a new version of the backup secret",
)
@click.option("--bucket", required=False, help="S3 bucket to upload to")
@click.pass_obj
def backup(
    settings: Settings,
    encrypt: bool | None,
    upload_to_s3: bool | None,
    to_aws_backup: bool | None,
    bucket: str | None,
) -> None:
    """Run the backup procedure.

    Choices not given on the command line are asked interactively.
    """
    run_operation(
        settings,
        lambda keyring: keyring.backup(
            encrypt=encrypt,
            upload=upload_to_s3,
            to_aws_backup=to_aws_backup,
            bucket=bucket,
        ),
    )


@cli.command(help="Rotate the master key during a maintenance window")
@click.pass_obj
def rotate(settings: Settings) -> None:
    """Run the rotation procedure."""
    run_operation(settings, lambda keyring: keyring.rotate())


@cli.command(help="Restore a backed-up master key (emergency recovery)")
@click.option("--key-file", required=False, type=click.Path(dir_okay=False), help="backup key file (JSON format)")
@click.option("--from-s3", required=False, is_flag=True, help="recover key from AWS S3")
@click.option("--s3-key", required=False, help="S3 key of the backup file (required with --from-s3)")
@click.option("--bucket", required=False, help="S3 bucket to read from")
@click.option("--from-aws-backup", required=False, is_flag=True, help="recover key from the backup secret")
@click.option(
    "--aws-version-id",
    required=False,
    help="version id or stage label of the backup (required with --from-aws-backup)",
)
@click.pass_obj
def recover(
    settings: Settings,
    key_file: str | None,
    from_s3: bool,
    s3_key: str | None,
    bucket: str | None,
    from_aws_backup: bool,
    aws_version_id: str | None,
) -> None:
    """Run the emergency recovery procedure."""
    try:
        request = build_request(
            key_file=key_file,
            from_s3=from_s3,
            s3_key=s3_key,
            bucket=bucket,
            from_aws_backup=from_aws_backup,
            aws_version_id=aws_version_id,
        )
    except KeyringError as e:
        console.error(str(e))
        sys.exit(1)

    ic(request)
    run_operation(settings, lambda keyring: keyring.recover(request))


if __name__ == "__main__":
    cli()
