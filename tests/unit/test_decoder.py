import json

import pytest

from lvtakeoff.decoding.decoder import (
    EXTRACTED_SYSTEM,
    FALLBACK_MARKER,
    STRATEGY_AGGRESSIVE,
    STRATEGY_CONSERVATIVE,
    STRATEGY_DIRECT,
    STRATEGY_EMPTY,
    STRATEGY_REGEX,
    DecodeResult,
    ResponseDecoder,
    empty_result,
)

MALFORMED_INPUTS = [
    "",
    "   ",
    "I could not read this drawing.",
    '{"summary": {"CABLING": {"Data Outlet": 4',
    "```json\n```",
    "```",
    "{",
    "}{][",
    "[[[[[[[[[[",
    '{"a": "unterminated',
    "\x00\x01\x02",
    "null",
    "42",
    '"just a string"',
    "{'single': 'quotes',}",
    "{" * 5000,
    "```python\nprint('hi')\n```",
]


class TestDecoderTotality:
    @pytest.mark.parametrize("text", MALFORMED_INPUTS)
    def test_never_raises(self, text: str) -> None:
        result = ResponseDecoder().decode(text)

        assert isinstance(result, DecodeResult)
        assert isinstance(result.as_object(), dict)

    def test_none_input(self) -> None:
        result = ResponseDecoder().decode(None)
        assert result.strategy == STRATEGY_EMPTY
        assert result.value == empty_result()

    def test_empty_result_shape(self) -> None:
        result = empty_result()
        assert result["devices"] == []
        assert result["summary"] == {}
        assert result["codeCompliance"]["status"] == "UNKNOWN"


class TestDecoderRoundTrip:
    @pytest.mark.parametrize(
        "wrapper",
        [
            "{body}",
            "```json\n{body}\n```",
            "```\n{body}\n```",
            "Here is the analysis:\n```json\n{body}\n```\nHope this helps!",
            "Result follows.\n```\n{body}\n```",
            "Counts: {body} -- end of answer",
            "Here you go:\n```json\n{body}\n```",
        ],
    )
    def test_recovers_embedded_object(self, wrapper: str) -> None:
        payload = {
            "summary": {"CABLING": {"Data Outlet": 12}, "FIRE": {"Smoke Detector": 3}},
            "closets": [{"name": "IDF-1", "notes": "braces } inside { strings, ``` fences too"}],
            "confidence": 0.9,
        }
        text = wrapper.replace("{body}", json.dumps(payload, indent=2))

        result = ResponseDecoder().decode(text)

        assert result.value == payload
        assert not result.used_fallback

    def test_fence_inside_string_after_prose(self) -> None:
        payload = {"summary": {"CABLING": {"Data Outlet": 3}}, "notes": "use ``` fences in output"}
        text = "Here you go:\n```json\n" + json.dumps(payload) + "\n```"

        result = ResponseDecoder().decode(text)

        assert result.value == payload
        assert result.strategy == STRATEGY_DIRECT

    def test_bracketed_prose_before_object(self) -> None:
        payload = {"summary": {"CABLING": {"Data Outlet": 3}}}
        text = "Sure [see note 1]:\n" + json.dumps(payload)

        result = ResponseDecoder().decode(text)

        assert result.value == payload
        assert not result.used_fallback


class TestDecoderStrategies:
    def test_direct(self) -> None:
        assert ResponseDecoder().decode('{"a": 1}').strategy == STRATEGY_DIRECT

    def test_conservative(self) -> None:
        result = ResponseDecoder().decode('{"a": [1, 2,],}')
        assert result.strategy == STRATEGY_CONSERVATIVE
        assert result.value == {"a": [1, 2]}

    def test_aggressive(self) -> None:
        result = ResponseDecoder().decode("```json\n{status: 'COMPLIANT', violations: []}\n```")
        assert result.strategy == STRATEGY_AGGRESSIVE
        assert result.value == {"status": "COMPLIANT", "violations": []}

    def test_regex_fallback_marks_result(self) -> None:
        text = 'Totals were "Data Outlet": 14 and "Card Reader": 2 but JSON got cut {"devices": ['

        result = ResponseDecoder().decode(text)

        assert result.strategy == STRATEGY_REGEX
        assert result.used_fallback
        value = result.as_object()
        assert value["summary"] == {EXTRACTED_SYSTEM: {"Data Outlet": 14, "Card Reader": 2}}
        assert value["notes"] == FALLBACK_MARKER

    def test_custom_device_patterns(self) -> None:
        decoder = ResponseDecoder(device_patterns=(r"Speaker",))
        result = decoder.decode('oops "Speaker": 6 "WAP": 2')
        assert result.as_object()["summary"] == {EXTRACTED_SYSTEM: {"Speaker": 6}}

    def test_array_is_not_an_object(self) -> None:
        result = ResponseDecoder().decode("[1, 2, 3]")
        assert result.value == [1, 2, 3]
        assert result.as_object() == empty_result()
