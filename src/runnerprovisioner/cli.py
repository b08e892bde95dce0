import logging
import os

import click
from rich.logging import RichHandler

from .constants import DEFAULT_CONFIG_FILE, DEFAULT_LABELS, DEFAULT_USERNAME, DEFAULT_WORK_DIR
from .core import ProvisionerError, RunnerProvisioner
from .models import RunDefaults
from .services.arguments import ArgumentResolver
from .services.config_loader import ConfigLoader
from .services.validation import ValidationService


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("arguments", nargs=-1)
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_FILE} if present.",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
@click.option(
    "--runner-version",
    required=False,
    help="Runner release to install. Requires --runner-sha256 when it differs from the pinned one.",
)
@click.option(
    "--runner-sha256",
    required=False,
    help="Expected SHA-256 checksum of the runner package.",
)
@click.option(
    "--download-base-url",
    required=False,
    help="HTTPS base URL of the runner release downloads (for mirrors).",
)
@click.option(
    "--download-timeout",
    required=False,
    type=float,
    default=None,
    help="HTTP download timeout in seconds.",
)
@click.pass_context
def main(
    ctx,
    arguments,
    config,
    verbose,
    log_file,
    runner_version,
    runner_sha256,
    download_base_url,
    download_timeout,
):
    """Download, register and start a self-hosted GitHub Actions runner.

    ARGUMENTS: repo_url token [runner_name] [labels] [work_dir] [username]
    """
    logger = logging.getLogger("runnerprovisioner")

    if len(arguments) < 2:
        # Usage comes before any config, network or filesystem access.
        click.echo("Error: Missing required arguments")
        click.echo("")
        click.echo(ArgumentResolver().usage(ctx.info_name or "runner-provisioner"))
        ctx.exit(1)

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except ProvisionerError as exc:
        raise click.ClickException(str(exc)) from exc

    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    log_file = _resolve_option(log_file, config_values, "log_file")
    runner_version = _resolve_option(runner_version, config_values, "runner_version")
    runner_sha256 = _resolve_option(runner_sha256, config_values, "runner_sha256")
    download_base_url = _resolve_option(download_base_url, config_values, "download_base_url")
    download_timeout = _resolve_option(download_timeout, config_values, "download_timeout")
    if download_timeout is not None:
        download_timeout = float(download_timeout)
    if log_file:
        log_file = os.path.abspath(log_file)
    defaults = RunDefaults(
        labels=str(_resolve_option(None, config_values, "default_labels", default=DEFAULT_LABELS)),
        work_dir=str(_resolve_option(None, config_values, "default_work_dir", default=DEFAULT_WORK_DIR)),
        username=str(_resolve_option(None, config_values, "default_username", default=DEFAULT_USERNAME)),
    )

    run_config = ArgumentResolver(defaults=defaults).resolve(list(arguments))

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    try:
        release = ValidationService().build_release(
            runner_version=str(runner_version) if runner_version is not None else None,
            runner_sha256=str(runner_sha256) if runner_sha256 is not None else None,
            download_base_url=download_base_url,
        )
        provisioner = RunnerProvisioner(
            config=run_config,
            release=release,
            verbose=verbose,
            download_timeout=download_timeout,
            log_file=log_file,
        )
    except ProvisionerError as exc:
        raise click.ClickException(str(exc)) from exc

    raise SystemExit(provisioner.run())


if __name__ == "__main__":
    main()
