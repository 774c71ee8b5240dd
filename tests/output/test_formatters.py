"""Tests for output mode selection."""

import json

from layerctl.output.formatters import OutputSettings, format_result
from layerctl.services.result import ServiceError, ServiceResult


def _result() -> ServiceResult:
    return ServiceResult(
        ok=True,
        op="scopes",
        data={"resolution": {"available": ["user"]}},
        warnings=["Skipped user tools layer: invalid YAML"],
    )


class TestFormatResult:
    def test_default_is_rich(self) -> None:
        output = format_result(_result())
        assert "Resolution: user" in output

    def test_json(self) -> None:
        output = format_result(_result(), settings=OutputSettings(json_output=True))
        parsed = json.loads(output)
        assert parsed["ok"] is True
        assert parsed["op"] == "scopes"
        assert parsed["warnings"] == ["Skipped user tools layer: invalid YAML"]
        assert "error" not in parsed

    def test_json_error(self) -> None:
        result = ServiceResult(
            ok=False, op="show", error=ServiceError(code="INVALID_LAYER", message="bad")
        )
        parsed = json.loads(format_result(result, settings=OutputSettings(json_output=True)))
        assert parsed["error"]["code"] == "INVALID_LAYER"

    def test_json_wins_over_quiet(self) -> None:
        settings = OutputSettings(json_output=True, quiet=True)
        assert json.loads(format_result(_result(), settings=settings))["op"] == "scopes"

    def test_quiet(self) -> None:
        assert format_result(_result(), settings=OutputSettings(quiet=True)) == "user"
