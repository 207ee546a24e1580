import logging
import os
import pathlib
import sys
from typing import Any

import yaml

import click
from icucheck import report, validator
from icucheck.message import IcuMessageParser

logger = logging.getLogger(__name__)

EXIT_FATAL = 2

DEFAULT_CONFIG: dict[str, Any] = {
    "locales_dir": "locales",
    "source_locale": "en-US",
    "namespaces": ["game", "site", "pages", "error", "faq"],
    "missing_display_cap": 10,
    "allow_tags": True,
    "logging": {
        "level": "WARNING",
        "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        "datefmt": "%Y-%m-%d %H:%M:%S",
    },
}


def env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() not in ("", "0", "false", "no", "off")


def detect_ci() -> bool:
    return env_flag("GITHUB_ACTIONS") or env_flag("CI")


def load_config(config_file_path: pathlib.Path) -> dict[str, Any]:
    """Read config.yml, falling back to the defaults for anything it omits.

    A missing file is not an error. A malformed one raises yaml.YAMLError.
    """
    config = dict(DEFAULT_CONFIG)
    config["logging"] = dict(DEFAULT_CONFIG["logging"])
    try:
        with open(config_file_path, "r") as file:
            loaded = yaml.safe_load(file) or {}
    except FileNotFoundError:
        logger.info(f"{config_file_path} not found, using defaults")
        return config

    if not isinstance(loaded, dict):
        raise yaml.YAMLError(f"{config_file_path} must contain a mapping")
    for key, value in loaded.items():
        if key == "logging" and isinstance(value, dict):
            config["logging"].update(value)
        else:
            config[key] = value
    return config


@click.group(invoke_without_command=True)
@click.version_option()
@click.pass_context
def cli(ctx: click.Context) -> None:
    if ctx.invoked_subcommand is None:
        ctx.invoke(check)


@cli.command("check")
@click.option("--config-folder", default="config", help="Configuration folder path.")
@click.option("--locales-folder", default=None, help="Locales folder path (overrides config).")
@click.option("--source-locale", default=None, help="Source locale (overrides config).")
@click.option(
    "--namespace",
    "namespaces",
    multiple=True,
    help="Namespace to check, repeatable (overrides config).",
)
@click.option("--report-file", default=None, help="Write a Markdown report to this path.")
@click.option(
    "--ci/--no-ci",
    default=None,
    help="Plain output with GitHub Actions annotations. Detected from the environment by default.",
)
def check(
    config_folder: str,
    locales_folder: str | None,
    source_locale: str | None,
    namespaces: tuple[str, ...],
    report_file: str | None,
    ci: bool | None,
) -> None:
    config_file_path = pathlib.Path(config_folder).absolute() / "config.yml"
    try:
        config = load_config(config_file_path)
    except yaml.YAMLError as exc:
        click.echo(f"FATAL: invalid configuration {config_file_path}: {exc}", err=True)
        sys.exit(EXIT_FATAL)

    logging.basicConfig(
        level=logging.getLevelName(str(config["logging"]["level"]).upper()),
        format=config["logging"]["format"],
        datefmt=config["logging"]["datefmt"],
    )

    if ci is None:
        ci = detect_ci()
    locales_dir = pathlib.Path(locales_folder or config["locales_dir"])
    source_locale = source_locale or config["source_locale"]
    selected_namespaces = list(namespaces) or list(config["namespaces"])

    if not locales_dir.is_dir():
        click.echo(f"FATAL: locales folder {locales_dir} does not exist", err=True)
        sys.exit(EXIT_FATAL)

    style = report.Styler(ci)
    try:
        result = validator.run(
            locales_dir=locales_dir,
            source_locale=source_locale,
            namespaces=selected_namespaces,
            parser=IcuMessageParser(allow_tags=bool(config["allow_tags"])),
        )
    except validator.SourceLocaleError as exc:
        click.echo(style(f"FATAL: {exc}", fg="red"), err=True)
        sys.exit(EXIT_FATAL)

    if not result.coverage:
        click.echo(style("No target locales found.", fg="yellow"))
        if result.passed:
            sys.exit(0)

    for line in report.render(
        result,
        ci=ci,
        missing_display_cap=int(config["missing_display_cap"]),
        locales_prefix=locales_dir.as_posix(),
    ):
        click.echo(line)

    if report_file:
        with open(report_file, "w", encoding="utf-8") as file:
            file.write(report.render_markdown(result))
    elif ci and os.environ.get("GITHUB_STEP_SUMMARY"):
        logger.info("Appending Markdown report to the job summary")
        with open(os.environ["GITHUB_STEP_SUMMARY"], "a", encoding="utf-8") as file:
            file.write(report.render_markdown(result))

    sys.exit(result.exit_code)
