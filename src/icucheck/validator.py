import json
import logging
import pathlib
from typing import Any

from icucheck import classes
from icucheck.classes import Coverage, Issue, ValidationResult
from icucheck.flatten import flatten
from icucheck.message import (
    IcuMessageParser,
    MessageParser,
    MessageSyntaxError,
    extract_placeholders,
    placeholders_of,
    validate_message,
)

logger = logging.getLogger(__name__)


class SourceLocaleError(Exception):
    def __init__(self, path: pathlib.Path) -> None:
        super().__init__(f"cannot load {path}")
        self.path = path


def namespace_path(locales_dir: pathlib.Path, locale: str, namespace: str) -> pathlib.Path:
    return locales_dir / locale / f"{namespace}.json"


def load_json(path: pathlib.Path) -> Any | None:
    """Return the parsed document, or None if it is missing, unreadable,
    not valid JSON or not an object or array at the top level."""
    try:
        document = json.loads(path.read_text("utf-8"))
        if isinstance(document, (dict, list)):
            return document
        logger.debug(f"{path} does not contain an object or array")
    except FileNotFoundError:
        logger.debug(f"{path} does not exist")
    except (OSError, UnicodeDecodeError) as ex:
        logger.debug(f"Error reading {path}: {ex}")
    except json.JSONDecodeError as ex:
        logger.debug(f"Error parsing {path}: {ex}")
    return None


def discover_locales(locales_dir: pathlib.Path, source_locale: str) -> list[str]:
    return sorted(
        entry.name
        for entry in locales_dir.iterdir()
        if entry.is_dir() and entry.name != source_locale and not entry.name.startswith(".")
    )


def validate_source(
    parser: MessageParser,
    *,
    locales_dir: pathlib.Path,
    source_locale: str,
    namespaces: list[str],
) -> tuple[dict[str, dict[str, str]], list[Issue]]:
    """Load, flatten and syntax-check every namespace of the source locale.

    Raises SourceLocaleError if any source file is missing or is not valid
    JSON, since there is nothing to compare against without it.
    """
    catalogs: dict[str, dict[str, str]] = {}
    issues: list[Issue] = []
    for namespace in namespaces:
        path = namespace_path(locales_dir, source_locale, namespace)
        document = load_json(path)
        if document is None:
            raise SourceLocaleError(path)

        catalog = flatten(document)
        catalogs[namespace] = catalog
        logger.debug(f"Loaded {len(catalog)} source keys from {path}")

        for key, value in catalog.items():
            error = validate_message(parser, value)
            if error is not None:
                issues.append(
                    Issue(
                        classes.ERROR,
                        source_locale,
                        namespace,
                        key,
                        classes.invalid_syntax(error, source=True),
                    )
                )
    return catalogs, issues


def compare_namespace(
    parser: MessageParser,
    locale: str,
    namespace: str,
    source_catalog: dict[str, str],
    document: Any | None,
) -> tuple[list[Issue], Coverage]:
    """Compare one target namespace document against its source catalog.

    ``document`` is None when the target file could not be loaded. Anything
    other than an object or array is a file-level error too. Every source key
    still counts towards the coverage total in that case.
    """
    issues: list[Issue] = []
    coverage = Coverage(total=len(source_catalog))

    def report(severity: str, key: str, message: str) -> None:
        issues.append(Issue(severity, locale, namespace, key, message))

    if not isinstance(document, (dict, list)):
        report(classes.ERROR, classes.FILE_KEY, classes.FILE_INVALID)
        return issues, coverage

    target_catalog = flatten(document)

    for key in target_catalog:
        if key not in source_catalog:
            report(classes.ERROR, key, classes.EXTRA_KEY)

    for key, source_value in source_catalog.items():
        if key not in target_catalog:
            report(classes.WARNING, key, classes.MISSING_TRANSLATION)
            continue

        coverage.translated += 1
        target_value = target_catalog[key]
        if not target_value.strip():
            report(classes.WARNING, key, classes.EMPTY_VALUE)
            continue

        try:
            target_nodes = parser.parse(target_value)
        except MessageSyntaxError as ex:
            report(classes.ERROR, key, classes.invalid_syntax(str(ex)))
            continue

        source_placeholders = placeholders_of(parser, source_value)
        target_placeholders = extract_placeholders(target_nodes)
        for name in sorted(source_placeholders - target_placeholders):
            report(classes.ERROR, key, classes.missing_placeholder(name))
        for name in sorted(target_placeholders - source_placeholders):
            report(classes.ERROR, key, classes.unknown_placeholder(name))

    return issues, coverage


def run(
    *,
    locales_dir: pathlib.Path,
    source_locale: str,
    namespaces: list[str],
    parser: MessageParser | None = None,
) -> ValidationResult:
    if parser is None:
        parser = IcuMessageParser()

    logger.info(f"Loading source locale {source_locale}...")
    source_catalogs, source_issues = validate_source(
        parser, locales_dir=locales_dir, source_locale=source_locale, namespaces=namespaces
    )
    result = ValidationResult(source_locale, issues=source_issues)
    if source_issues:
        logger.error(f"Found {len(source_issues)} syntax errors in source locale {source_locale}")

    locales = discover_locales(locales_dir, source_locale)
    logger.info(f"Target locales: {len(locales)}")

    for locale in locales:
        logger.info(f"Validating {locale}...")
        coverage = Coverage()
        locale_issues: list[Issue] = []
        for namespace in namespaces:
            document = load_json(namespace_path(locales_dir, locale, namespace))
            issues, namespace_coverage = compare_namespace(
                parser, locale, namespace, source_catalogs[namespace], document
            )
            locale_issues.extend(issues)
            coverage.add(namespace_coverage)

        result.issues.extend(locale_issues)
        result.coverage[locale] = coverage

        errors = sum(1 for issue in locale_issues if issue.is_error)
        if errors:
            logger.error(f"Found {errors} errors for {locale}")
        else:
            logger.info(f"No errors found for {locale} ({coverage.percent}% translated)")

    return result
