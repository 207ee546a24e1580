import json
import pathlib

import pytest

from icucheck.message import MessageSyntaxError


class FakeParser:
    """Returns hand-built node trees keyed by message text."""

    def __init__(self, trees=None, errors=None):
        self.trees = trees or {}
        self.errors = errors or {}
        self.calls = []

    def parse(self, text):
        self.calls.append(text)
        if text in self.errors:
            raise MessageSyntaxError(self.errors[text])
        return self.trees.get(text, [])


@pytest.fixture
def fake_parser():
    return FakeParser


@pytest.fixture
def write_locale(tmp_path):
    locales_dir = tmp_path / "locales"
    locales_dir.mkdir()

    def write(locale, namespace, content):
        path = locales_dir / locale / f"{namespace}.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            path.write_text(content, "utf-8")
        else:
            path.write_text(json.dumps(content, ensure_ascii=False), "utf-8")
        return path

    write.locales_dir = locales_dir
    return write


@pytest.fixture
def locales_dir(write_locale) -> pathlib.Path:
    return write_locale.locales_dir
