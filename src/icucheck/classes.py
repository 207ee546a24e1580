import math
from dataclasses import dataclass, field

ERROR = "error"
WARNING = "warning"

FILE_KEY = "*"

FILE_INVALID = "File missing or invalid JSON"
EXTRA_KEY = "Extra key not in source"
MISSING_TRANSLATION = "Missing translation"
EMPTY_VALUE = "Empty value"


def invalid_syntax(error: str, source: bool = False) -> str:
    if source:
        return f"Invalid message syntax in source: {error}"
    return f"Invalid message syntax: {error}"


def missing_placeholder(name: str) -> str:
    return f"Missing placeholder: {name}"


def unknown_placeholder(name: str) -> str:
    return f"Unknown placeholder: {name}"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass
class Issue:
    severity: str
    locale: str
    namespace: str
    key: str
    message: str

    @property
    def is_error(self) -> bool:
        return self.severity == ERROR

    @property
    def filename(self) -> str:
        return f"{self.namespace}.json"


@dataclass
class Coverage:
    total: int = 0
    translated: int = 0

    def add(self, other: "Coverage") -> None:
        self.total += other.total
        self.translated += other.translated

    @property
    def percent(self) -> int:
        if self.total == 0:
            return 0
        return round_half_up(self.translated / self.total * 100)


@dataclass
class ValidationResult:
    source_locale: str
    issues: list[Issue] = field(default_factory=list)
    coverage: dict[str, Coverage] = field(default_factory=dict)

    @property
    def errors(self) -> list[Issue]:
        return [issue for issue in self.issues if issue.is_error]

    @property
    def warnings(self) -> list[Issue]:
        return [issue for issue in self.issues if not issue.is_error]

    @property
    def passed(self) -> bool:
        return not self.errors

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1
