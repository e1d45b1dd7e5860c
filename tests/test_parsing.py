"""
Tests for parsing structured model replies.
"""

import json

import pytest

from concept_interview.errors import MalformedResponse
from concept_interview.parsing import (
    strip_code_fences,
    parse_structured_reply,
    parse_question_reply,
    parse_options_reply,
    parse_concepts_reply,
    parse_classification,
)
from concept_interview.schemas.conversation import Classification

from llm_fakes import concepts_reply, question_reply


class TestStripCodeFences:
    def test_plain_text_untouched(self):
        assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'

    def test_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fences('```\n[1, 2]\n```') == '[1, 2]'

    def test_fence_with_surrounding_prose(self):
        text = 'Here you go:\n```json\n{"a": 1}\n```\nHope that helps!'
        assert strip_code_fences(text) == '{"a": 1}'

    def test_unterminated_fence(self):
        assert strip_code_fences('```json\n{"a": 1}') == '{"a": 1}'


class TestParseStructuredReply:
    def test_parses_object(self):
        assert parse_structured_reply('{"question": "Q"}') == {"question": "Q"}

    def test_parses_fenced_object(self):
        assert parse_structured_reply('```json\n{"x": [1]}\n```') == {"x": [1]}

    def test_extracts_json_from_prose(self):
        assert parse_structured_reply('Sure! {"x": 2} Let me know.') == {"x": 2}

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty_reply_rejected(self, text):
        with pytest.raises(MalformedResponse):
            parse_structured_reply(text)

    def test_non_json_rejected(self):
        with pytest.raises(MalformedResponse):
            parse_structured_reply("I think you should build a todo app.")

    def test_truncated_json_rejected(self):
        with pytest.raises(MalformedResponse):
            parse_structured_reply('{"question": "Who", "options": ["a", "b"')


class TestParseQuestionReply:
    def test_valid_reply(self):
        reply = parse_question_reply(question_reply("Who?", ["a", "b", "c", "d", "e"]))
        assert reply.question == "Who?"
        assert reply.options == ["a", "b", "c", "d", "e"]

    def test_fenced_reply(self):
        reply = parse_question_reply(question_reply("Who?", ["a", "b", "c", "d", "e"], fenced=True))
        assert len(reply.options) == 5

    @pytest.mark.parametrize("count", [0, 4, 6])
    def test_wrong_option_count_rejected(self, count):
        text = question_reply("Who?", [f"opt {i}" for i in range(count)])
        with pytest.raises(MalformedResponse, match="Expected 5 options"):
            parse_question_reply(text)

    def test_custom_option_count(self):
        text = question_reply("Who?", ["a", "b", "c"])
        assert len(parse_question_reply(text, option_count=3).options) == 3

    def test_missing_question_rejected(self):
        with pytest.raises(MalformedResponse):
            parse_question_reply(json.dumps({"options": ["a", "b", "c", "d", "e"]}))

    def test_options_not_a_list_rejected(self):
        with pytest.raises(MalformedResponse):
            parse_question_reply(json.dumps({"question": "Q", "options": "a, b, c, d, e"}))

    def test_blank_option_rejected(self):
        with pytest.raises(MalformedResponse):
            parse_question_reply(json.dumps({"question": "Q", "options": ["a", "b", "", "d", "e"]}))

    def test_list_instead_of_object_rejected(self):
        with pytest.raises(MalformedResponse):
            parse_question_reply('["a", "b"]')


class TestParseOptionsReply:
    def test_object_with_options(self):
        assert parse_options_reply('{"options": ["x", "y"]}') == ["x", "y"]

    def test_bare_list_accepted(self):
        assert parse_options_reply('["x"]') == ["x"]

    def test_empty_options_rejected(self):
        with pytest.raises(MalformedResponse):
            parse_options_reply('{"options": []}')

    def test_missing_options_rejected(self):
        with pytest.raises(MalformedResponse):
            parse_options_reply('{"choices": ["x"]}')


class TestParseConceptsReply:
    def test_three_concepts_with_three_features(self):
        concepts = parse_concepts_reply(concepts_reply())
        assert len(concepts) == 3
        assert all(len(c.key_features) == 3 for c in concepts)
        assert concepts[0].name == "Concept 1"
        assert concepts[0].key_features[0].name == "Feature 1.1"

    def test_bare_list_accepted(self):
        data = json.loads(concepts_reply())["concepts"]
        assert len(parse_concepts_reply(json.dumps(data))) == 3

    def test_wrong_concept_count_rejected(self):
        with pytest.raises(MalformedResponse, match="Expected 3 concepts"):
            parse_concepts_reply(concepts_reply(count=2))

    def test_wrong_feature_count_rejected(self):
        with pytest.raises(MalformedResponse, match="exactly 3 key features"):
            parse_concepts_reply(concepts_reply(features=2))

    def test_string_features_accepted(self):
        data = {"concepts": [
            {"name": f"C{i}", "description": "d", "key_features": ["a", "b", "c"]}
            for i in range(3)
        ]}
        concepts = parse_concepts_reply(json.dumps(data))
        assert concepts[0].key_features[0].name == "a"
        assert concepts[0].key_features[0].description == ""

    def test_missing_description_rejected(self):
        data = {"concepts": [
            {"name": f"C{i}", "key_features": ["a", "b", "c"]} for i in range(3)
        ]}
        with pytest.raises(MalformedResponse):
            parse_concepts_reply(json.dumps(data))


class TestParseClassification:
    @pytest.mark.parametrize("text,expected", [
        ("VALID", Classification.VALID),
        ("valid", Classification.VALID),
        ("ABSTRACT.", Classification.ABSTRACT),
        ("Classification: INVALID", Classification.INVALID),
        ('{"classification": "ABSTRACT"}', Classification.ABSTRACT),
        ("```\nVALID\n```", Classification.VALID),
    ])
    def test_recognised(self, text, expected):
        assert parse_classification(text) == expected

    @pytest.mark.parametrize("text", [
        "Not VALID. This is ABSTRACT.",
        "This is not VALID",
        "VALID or INVALID, hard to say",
        '{"classification": "not VALID"}',
    ])
    def test_conflicting_or_negated_rejected(self, text):
        with pytest.raises(MalformedResponse):
            parse_classification(text)

    def test_unknown_word_rejected(self):
        with pytest.raises(MalformedResponse):
            parse_classification("Maybe?")

    def test_empty_rejected(self):
        with pytest.raises(MalformedResponse):
            parse_classification("")
