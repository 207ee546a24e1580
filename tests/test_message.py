import pytest

from icucheck.message import (
    ArgumentNode,
    ChoiceNode,
    IcuMessageParser,
    MessageSyntaxError,
    PoundNode,
    TagNode,
    TextNode,
    extract_placeholders,
    find_duplicate_cases,
    placeholders_of,
    validate_message,
)


def test_extract_simple_and_typed_arguments():
    nodes = [
        ArgumentNode("hero"),
        TextNode(" scored "),
        ArgumentNode("score", "number"),
        TextNode(" on "),
        ArgumentNode("day", "date", "short"),
        ArgumentNode("at", "time"),
    ]
    assert extract_placeholders(nodes) == {"hero", "score", "day", "at"}


def test_extract_choice_records_controller_once_and_walks_cases():
    nodes = [
        ChoiceNode(
            "count",
            "plural",
            {
                "one": [PoundNode("count"), TextNode(" team for "), ArgumentNode("player")],
                "other": [PoundNode("count"), TextNode(" teams for "), ArgumentNode("player")],
            },
        )
    ]
    assert extract_placeholders(nodes) == {"count", "player"}


def test_extract_tags_are_scoped_and_children_are_walked():
    nodes = [
        TagNode("b", [ArgumentNode("name")]),
        TagNode("br"),
        ArgumentNode("b"),
    ]
    assert extract_placeholders(nodes) == {"<b>", "<br>", "name", "b"}


def test_extract_ignores_text_and_case_labels():
    nodes = [
        TextNode("{hero} in text"),
        ChoiceNode("gender", "select", {"male": [TextNode("he")], "other": [TextNode("they")]}),
    ]
    assert extract_placeholders(nodes) == {"gender"}


def test_extract_nested_choices():
    nodes = [
        ChoiceNode(
            "gender",
            "select",
            {
                "female": [ChoiceNode("count", "plural", {"other": [ArgumentNode("host")]})],
                "other": [TagNode("link", [TextNode("more")])],
            },
        )
    ]
    assert extract_placeholders(nodes) == {"gender", "count", "host", "<link>"}


def test_placeholders_of_unparsable_message_is_empty(fake_parser):
    parser = fake_parser(errors={"{broken": "Unexpected end of input"})
    assert placeholders_of(parser, "{broken") == set()
    assert validate_message(parser, "{broken") == "Unexpected end of input"
    assert validate_message(parser, "fine") is None


@pytest.fixture
def parser():
    return IcuMessageParser()


def test_icu_parser_plain_text(parser):
    assert placeholders_of(parser, "Just some text") == set()


def test_icu_parser_arguments(parser):
    assert placeholders_of(parser, "{hero} wins with {score, number} points") == {"hero", "score"}


def test_icu_parser_plural(parser):
    text = "{count, plural, one {# team} other {# teams}}"
    assert placeholders_of(parser, text) == {"count"}
    assert placeholders_of(parser, "{count}개 팀") == {"count"}


def test_icu_parser_text_inside_cases_is_not_a_placeholder(parser):
    text = "{count, plural, one {hero} other {heroes for {player}}}"
    assert placeholders_of(parser, text) == {"count", "player"}


def test_icu_parser_reordered_cases_give_same_placeholders(parser):
    first = "{role, select, tank {{name} tanks} support {heals} other {{name} plays}}"
    second = "{role, select, other {{name} plays} support {heals} tank {{name} tanks}}"
    assert placeholders_of(parser, first) == placeholders_of(parser, second) == {"role", "name"}


@pytest.mark.parametrize(
    "text",
    [
        "{hero",
        "{{hero}}",
        "{count, plural, one {# team}}",
        "{score, numbr} points",
        "{x, spellout}",
        "{n, plural, other {{hero}} other {#}}",
        "{g, select, a {{n, plural, one {x} one {y} other {z}}} other {w}}",
    ],
)
def test_icu_parser_rejects_malformed_messages(parser, text):
    with pytest.raises(MessageSyntaxError):
        parser.parse(text)
    assert validate_message(parser, text)


@pytest.mark.parametrize(
    "text",
    ["{score, number} points", "{day, date, short}", "{at, time}"],
)
def test_icu_parser_accepts_typed_arguments(parser, text):
    assert validate_message(parser, text) is None


def test_icu_parser_tags(parser):
    assert placeholders_of(parser, "<b>{name}</b> wins") == {"<b>", "name"}
    assert placeholders_of(parser, "<br/>") == {"<br>"}


def test_icu_parser_rejects_unclosed_tag(parser):
    with pytest.raises(MessageSyntaxError):
        parser.parse("<b>oops")


def test_icu_parser_tags_disabled():
    assert placeholders_of(IcuMessageParser(allow_tags=False), "<b>x</b>") == set()


def test_find_duplicate_cases():
    assert find_duplicate_cases("{n, plural, one {#} other {# {n}}}") == []
    assert find_duplicate_cases("{n, plural, offset:1 =0 {a} other {b} other {c}}") == [
        ("n", "other")
    ]
    assert find_duplicate_cases("'{n, select, a {x} a {y}}' {m}") == []
    assert find_duplicate_cases(
        "{g, select, a {{n, plural, one {x} one {y} other {z}}} a {w} other {v}}"
    ) == [("n", "one"), ("g", "a")]


def test_icu_parser_distinct_cases_are_valid(parser):
    text = "{role, select, tank {{name} tanks} support {heals} other {{name} plays}}"
    assert validate_message(parser, text) is None
