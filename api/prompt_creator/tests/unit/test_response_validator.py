"""Unit tests for validating generation replies."""

import json
import logging

import pytest

from prompt_creator.models.exceptions import ParseError, SchemaError
from prompt_creator.models.schemas import GenerationResult
from prompt_creator.services.response_validator import parse_json, validate_response


class TestParseJson:

    @pytest.mark.parametrize("raw", [None, "", "   \n"])
    def test_empty_is_parse_error(self, raw):
        with pytest.raises(ParseError):
            parse_json(raw)

    def test_not_json(self):
        with pytest.raises(ParseError) as exc_info:
            parse_json("not json")
        assert exc_info.value.raw_excerpt == "not json"

    def test_code_fence_stripped(self):
        assert parse_json('```json\n{"a": 1}\n```') == {"a": 1}
        assert parse_json('```\n[1, 2]\n```') == [1, 2]

    def test_truncated_json(self):
        with pytest.raises(ParseError):
            parse_json('{"midjourney": "a", "dalle": ')


class TestValidateResponse:

    def test_valid_reply_round_trips(self, sample_generation_payload, sample_generation_json):
        result = validate_response(sample_generation_json)
        assert isinstance(result, GenerationResult)
        assert result.model_dump(by_alias=True) == sample_generation_payload

    def test_missing_fields_names_first(self):
        with pytest.raises(SchemaError) as exc_info:
            validate_response('{"midjourney":"a"}')
        assert exc_info.value.field == "dalle"
        assert exc_info.value.contract == "generation_result"

    def test_missing_nested_field(self, sample_generation_payload):
        del sample_generation_payload["insight"]["texture_density"]["roughness"]
        with pytest.raises(SchemaError) as exc_info:
            validate_response(json.dumps(sample_generation_payload))
        assert exc_info.value.field == "insight.texture_density.roughness"

    def test_mistyped_score(self, sample_generation_payload):
        sample_generation_payload["insight"]["visual_balance"]["vibrancy"] = "high"
        with pytest.raises(SchemaError) as exc_info:
            validate_response(json.dumps(sample_generation_payload))
        assert exc_info.value.field == "insight.visual_balance.vibrancy"

    def test_earliest_field_reported(self, sample_generation_payload):
        sample_generation_payload["dalle"] = 3
        del sample_generation_payload["insight"]["designer_comment"]
        with pytest.raises(SchemaError) as exc_info:
            validate_response(json.dumps(sample_generation_payload))
        assert exc_info.value.field == "dalle"

    def test_unexpected_field(self, sample_generation_payload):
        sample_generation_payload["imagen"] = "extra"
        with pytest.raises(SchemaError) as exc_info:
            validate_response(json.dumps(sample_generation_payload))
        assert exc_info.value.field == "imagen"

    def test_array_root(self):
        with pytest.raises(SchemaError) as exc_info:
            validate_response("[]")
        assert exc_info.value.field == "$"

    def test_fenced_reply_accepted(self, sample_generation_json):
        result = validate_response(f"```json\n{sample_generation_json}\n```")
        assert result.dalle.startswith("A cozy")

    def test_out_of_range_scores_pass_through(self, sample_generation_payload, caplog):
        sample_generation_payload["insight"]["visual_balance"]["futurism"] = 140
        sample_generation_payload["insight"]["texture_density"]["roughness"] = -5
        with caplog.at_level(logging.WARNING, logger="prompt_creator.services.response_validator"):
            result = validate_response(json.dumps(sample_generation_payload))
        assert result.insight.visual_balance.futurism == 140
        assert result.insight.texture_density.roughness == -5
        assert any("outside 0-100" in r.getMessage() for r in caplog.records)

    def test_scores_view(self, sample_generation_json):
        scores = validate_response(sample_generation_json).insight.scores()
        assert scores["visual_balance.vibrancy"] == 62
        assert scores["texture_density.roughness"] == 65
        assert len(scores) == 8

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    def test_non_json_number_literals_rejected(self, sample_generation_json, literal):
        raw = sample_generation_json.replace('"vibrancy": 62', f'"vibrancy": {literal}')
        assert literal in raw
        with pytest.raises(ParseError, match=literal.lstrip("-")):
            validate_response(raw)
