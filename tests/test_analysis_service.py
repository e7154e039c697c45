# tests/test_analysis_service.py
"""Unit tests for the analysis adapter (prompt, data URLs, fence stripping, parsing)."""

import json
import pytest
from datetime import date
from unittest.mock import MagicMock
from app.errors import AnalysisParseError, ValidationError
from app.services.analysis_service import (
    analyze,
    build_prompt,
    parse_analysis,
    parse_data_url,
    strip_code_fences,
)
from app.services.classifier import ImagePart

RC_JSON = '{"detectedType":"Registration Certificate","regNumber":"DL01AB1234","status":"VALID","issues":[]}'


class TestDataUrls:
    def test_data_url_is_split(self):
        part = parse_data_url("data:image/png;base64,AAAA")
        assert part == ImagePart(mime_type="image/png", data="AAAA")

    def test_raw_string_falls_back_to_jpeg(self):
        part = parse_data_url("not-a-data-url")
        assert part.mime_type == "image/jpeg"
        assert part.data == "not-a-data-url"


class TestPrompt:
    def test_embeds_date_and_declared_type(self):
        prompt = build_prompt("Insurance Policy", today=date(2026, 10, 19))
        assert "Today's Date: Mon Oct 19 2026" in prompt
        assert "supposed to be a Insurance Policy" in prompt
        assert '"status": "VALID" | "EXPIRED" | "MISSING" | "SUSPICIOUS"' in prompt

    def test_driving_license_hints(self):
        prompt = build_prompt("Driving License")
        assert "DL No" in prompt
        assert "Regn No" not in prompt

    def test_registration_certificate_hints(self):
        prompt = build_prompt("Registration Certificate")
        assert "Regn No" in prompt
        assert "DL No" not in prompt

    def test_other_types_get_no_hints(self):
        prompt = build_prompt("PUC Certificate")
        assert "DL No" not in prompt and "Regn No" not in prompt


class TestFenceStripping:
    def test_json_fence(self):
        assert strip_code_fences(f"```json\n{RC_JSON}\n```") == RC_JSON

    def test_bare_fence(self):
        assert strip_code_fences(f"```\n{RC_JSON}\n```\n") == RC_JSON

    def test_no_fence_untouched(self):
        assert strip_code_fences(f"  {RC_JSON} ") == RC_JSON


class TestParseAnalysis:
    def test_fenced_response_parses(self):
        analysis = parse_analysis(f"```json\n{RC_JSON}\n```")
        assert analysis["regNumber"] == "DL01AB1234"
        assert analysis["status"] == "VALID"

    def test_truncated_json_raises(self):
        with pytest.raises(AnalysisParseError) as exc:
            parse_analysis('{"detectedType": "Registration Certif')
        assert exc.value.raw_text.startswith('{"detectedType"')

    def test_prose_raises(self):
        with pytest.raises(AnalysisParseError):
            parse_analysis("I could not read this document, sorry.")

    def test_array_raises(self):
        with pytest.raises(AnalysisParseError):
            parse_analysis('[{"status": "VALID"}]')

    def test_missing_status_raises(self):
        with pytest.raises(AnalysisParseError):
            parse_analysis('{"detectedType": "PUC"}')

    def test_unknown_fields_are_kept(self):
        analysis = parse_analysis('{"status": "SUSPICIOUS", "confidence": 0.4}')
        assert analysis == {"status": "SUSPICIOUS", "confidence": 0.4}


class TestAnalyze:
    def test_single_call_with_all_images(self):
        classifier = MagicMock()
        classifier.generate.return_value = RC_JSON

        analysis = analyze(classifier, ["data:image/png;base64,AAA", "BBB"], "Registration Certificate")

        classifier.generate.assert_called_once()
        prompt, parts = classifier.generate.call_args[0]
        assert "Registration Certificate" in prompt
        assert parts == [ImagePart("image/png", "AAA"), ImagePart("image/jpeg", "BBB")]
        assert analysis == json.loads(RC_JSON)

    def test_verdict_is_trusted_verbatim(self):
        classifier = MagicMock()
        classifier.generate.return_value = '{"status": "VALID", "expiryDate": "01-01-2001"}'
        assert analyze(classifier, ["AAA"], "Driving License")["status"] == "VALID"

    def test_no_images_rejected_without_call(self):
        classifier = MagicMock()
        with pytest.raises(ValidationError):
            analyze(classifier, [], "Driving License")
        classifier.generate.assert_not_called()

    def test_classifier_failure_propagates(self):
        classifier = MagicMock()
        classifier.generate.side_effect = RuntimeError("network down")
        with pytest.raises(RuntimeError):
            analyze(classifier, ["AAA"], "Driving License")
