"""Tests for the JSON extraction used on Gemini replies."""
import json

import pytest

from integrations.gemini.client import extract_json_object


class TestExtractJsonObject:
    """Test extract_json_object against the reply shapes the model produces."""

    def test_clean_json(self):
        raw = '{"action": "add", "message": null}'
        result = extract_json_object(raw)
        assert json.loads(result)["action"] == "add"

    def test_markdown_fence_json(self):
        raw = '```json\n{"action": "weather"}\n```'
        assert json.loads(extract_json_object(raw))["action"] == "weather"

    def test_markdown_fence_no_language(self):
        raw = '```\n{"action": "list"}\n```'
        assert json.loads(extract_json_object(raw))["action"] == "list"

    def test_prose_before_and_after(self):
        raw = '분석 결과입니다:\n{"shouldDelete": true, "confidence": 0.9}\n도움이 되었길 바랍니다!'
        parsed = json.loads(extract_json_object(raw))
        assert parsed["shouldDelete"] is True

    def test_nested_braces(self):
        raw = '{"action": "add", "schedule": {"title": "팀 회의", "date": "2025-09-11 15:00:00"}}'
        parsed = json.loads(extract_json_object(raw))
        assert parsed["schedule"]["title"] == "팀 회의"

    def test_multiple_json_objects_takes_first(self):
        raw = '{"a": 1}\n{"b": 2}'
        parsed = json.loads(extract_json_object(raw))
        assert "a" in parsed
        assert "b" not in parsed

    def test_no_json_raises_valueerror(self):
        raw = "죄송하지만 JSON으로 답할 수 없어요."
        with pytest.raises(ValueError, match="No valid JSON"):
            extract_json_object(raw)

    def test_empty_string_raises(self):
        with pytest.raises(ValueError):
            extract_json_object("")

    def test_only_opening_brace_raises(self):
        with pytest.raises(ValueError):
            extract_json_object('{"broken": ')

    def test_json_with_string_containing_braces(self):
        raw = '{"reason": "제목에 { 와 } 가 있음"}'
        parsed = json.loads(extract_json_object(raw))
        assert "{" in parsed["reason"]

    def test_markdown_fence_with_invalid_json_falls_through(self):
        """If the fence content is not valid JSON, fall through to brace matching."""
        raw = '```json\nnot valid json\n```\n\n하지만 여기: {"valid": true}'
        parsed = json.loads(extract_json_object(raw))
        assert parsed["valid"] is True

    def test_json_array_not_matched(self):
        """Only objects are extracted; a bare array is rejected."""
        with pytest.raises(ValueError):
            extract_json_object("[1, 2, 3]")

    def test_routing_reply_in_fence(self):
        raw = """경로를 제안합니다:
```json
{
    "routes": [
        {
            "title": "최단시간 경로",
            "totalTime": 25,
            "steps": [{"type": "지하철", "line": "2호선", "from": "강남역", "to": "교대역"}]
        }
    ]
}
```
"""
        parsed = json.loads(extract_json_object(raw))
        assert len(parsed["routes"]) == 1
        assert parsed["routes"][0]["steps"][0]["line"] == "2호선"

    def test_whitespace_around_json(self):
        raw = "   \n\n  {\"latitude\": 37.49}  \n\n  "
        assert json.loads(extract_json_object(raw))["latitude"] == 37.49
