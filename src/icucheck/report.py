from collections import defaultdict

import click

from icucheck import classes
from icucheck.classes import Issue, ValidationResult, round_half_up

BAR_WIDTH = 20


class Styler:
    """Wraps click.style so that CI output stays plain text."""

    def __init__(self, ci: bool) -> None:
        self.ci = ci

    def __call__(self, text: str, **styles) -> str:
        if self.ci:
            return text
        return click.style(text, **styles)


def coverage_bar(percent: int) -> str:
    filled = min(BAR_WIDTH, round_half_up(percent / 5))
    return "█" * filled + "░" * (BAR_WIDTH - filled)


def _percent_color(percent: int) -> str:
    if percent == 100:
        return "green"
    if percent >= 80:
        return "yellow"
    return "red"


def annotation(issue: Issue, locales_prefix: str) -> str:
    if issue.key == classes.FILE_KEY:
        message = issue.message
    elif issue.message == classes.EXTRA_KEY:
        message = f"Extra key: {issue.key}"
    else:
        message = f"{issue.key}: {issue.message}"
    path = f"{locales_prefix}/{issue.locale}/{issue.filename}"
    return f"::{issue.severity} file={path}::{message}"


def render(
    result: ValidationResult,
    *,
    ci: bool = False,
    missing_display_cap: int = 10,
    locales_prefix: str = "locales",
) -> list[str]:
    style = Styler(ci)
    lines: list[str] = []
    errors = result.errors
    warnings = result.warnings

    if ci:
        lines.extend(annotation(issue, locales_prefix) for issue in errors)

    lines.append(style("\n  Translation Coverage\n", bold=True))
    lines.append(f"  {'Locale':<10} {'Progress':<8} {'Bar':<22} Keys")
    lines.append(f"  {'-' * 10} {'-' * 8} {'-' * 22} {'-' * 12}")
    for locale, coverage in result.coverage.items():
        percent = coverage.percent
        lines.append(
            f"  {style(f'{locale:<10}', fg='cyan')} "
            f"{style(f'{percent}%'.rjust(5), fg=_percent_color(percent))}   "
            f"{style(coverage_bar(percent), dim=True)} "
            f"{style(f'{coverage.translated}/{coverage.total}', dim=True)}"
        )

    if errors:
        lines.append(style(f"\n  {len(errors)} error(s):\n", fg="red", bold=True))
        for issue in errors:
            lines.append(style(f"  x {issue.locale}/{issue.filename} : {issue.key}", fg="red"))
            lines.append(f"    {issue.message}\n")

    if warnings:
        missing = [w for w in warnings if w.message == classes.MISSING_TRANSLATION]
        empty = [w for w in warnings if w.message == classes.EMPTY_VALUE]

        lines.append(style(f"\n  {len(warnings)} warning(s):\n", fg="yellow", bold=True))
        if missing:
            lines.append(style(f"  {len(missing)} missing translation(s)", fg="yellow"))
            for issue in missing[:missing_display_cap]:
                lines.append(style(f"    {issue.locale}/{issue.filename} : {issue.key}", dim=True))
            if len(missing) > missing_display_cap:
                lines.append(style(f"    ... and {len(missing) - missing_display_cap} more", dim=True))
        if empty:
            lines.append(style(f"  {len(empty)} empty value(s)", fg="yellow"))

    if not errors:
        lines.append(style("\n  All checks passed.\n", fg="green", bold=True))

    return lines


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def render_markdown(result: ValidationResult) -> str:
    markdown = "# Translation report\n\n"
    markdown += "| Locale | Progress | Keys |\n| ------ | -------- | ---- |\n"
    for locale, coverage in result.coverage.items():
        markdown += f"| {locale} | {coverage.percent}% | {coverage.translated}/{coverage.total} |\n"
    markdown += "\n"

    grouped: dict[str, dict[str, list[Issue]]] = defaultdict(lambda: defaultdict(list))
    for issue in result.issues:
        grouped[issue.locale][issue.filename].append(issue)

    if not grouped:
        return markdown + "No issues found\n"

    for locale, files in grouped.items():
        markdown += f"## {locale}\n\n"
        for filename, problems in files.items():
            markdown += f"### {filename}\n"
            added_table = False
            for issue in problems:
                if issue.key == classes.FILE_KEY:
                    markdown += f"**{issue.message}**\n"
                    continue
                if not added_table:
                    markdown += "| Key | Level | Issue |\n| --- | ----- | ----- |\n"
                    added_table = True
                markdown += f"| `{issue.key}` | {issue.severity} | {_cell(issue.message)} |\n"
            markdown += "\n"
    return markdown
