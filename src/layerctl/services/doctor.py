"""DoctorService: scan, load, resolve, diagnose.

Every operation runs the same pipeline: discover scope directories,
load their layer files, and resolve them into one merged configuration.
Operations differ only in what they report about the result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from layerctl.domain.config import ConfigContext
from layerctl.domain.conflicts import Severity, assess_health, detect_conflicts
from layerctl.domain.layers import LayerType
from layerctl.domain.precedence import scope_resolution_path
from layerctl.domain.recommendations import generate_recommendations
from layerctl.domain.resolver import create_config_context, scope_summary
from layerctl.infrastructure.loader import load_all_scopes
from layerctl.infrastructure.scanner import ScanResult, scan_scope_directories
from layerctl.services.base import BaseService
from layerctl.services.result import ErrorCode, ServiceError, ServiceResult
from layerctl.services.telemetry import get_current_span, trace_span, traced

log = structlog.get_logger(__name__)

_SEVERITY_RANK: dict[Severity, int] = {
    Severity.INFO: 0,
    Severity.WARNING: 1,
    Severity.ERROR: 2,
}


@dataclass(frozen=True)
class _Resolved:
    scan: ScanResult
    context: ConfigContext
    warnings: list[str]


class DoctorService(BaseService):
    """Resolves the scope hierarchy and reports on it."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @traced
    def doctor(
        self,
        *,
        recommendations: bool = True,
        min_severity: str = "info",
        heuristics: bool | None = None,
    ) -> ServiceResult:
        """Detect conflicts, score health, and suggest improvements.

        Args:
            recommendations: Include the recommendation report.
            min_severity: Hide conflicts below this severity. Counts and
                the health score always cover every conflict.
            heuristics: Run cross-layer heuristics; defaults to
                ``[doctor] heuristics``.
        """
        op = "doctor"
        try:
            floor = Severity(min_severity)
        except ValueError:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code=ErrorCode.INVALID_SEVERITY,
                    message=f"Unknown severity: {min_severity!r}",
                    detail={"choices": [s.value for s in Severity]},
                ),
            )

        resolved = self._resolve(op)
        if isinstance(resolved, ServiceResult):
            return resolved

        cfg = self._settings.doctor
        merged = resolved.context.config
        scopes = resolved.context.scopes
        run_heuristics = cfg.heuristics if heuristics is None else heuristics

        with trace_span("detect_conflicts") as span:
            detection = detect_conflicts(merged, scopes, heuristics=run_heuristics)
            if span:
                span.annotate("conflicts", len(detection.conflicts))

        assessment = assess_health(
            detection.health_score,
            healthy_threshold=cfg.healthy_threshold,
            attention_threshold=cfg.attention_threshold,
        )
        shown = [
            c for c in detection.conflicts if _SEVERITY_RANK[c.severity] >= _SEVERITY_RANK[floor]
        ]

        data: dict[str, Any] = {
            "health_score": detection.health_score,
            "assessment": assessment.value,
            "counts": {
                "errors": len(detection.by_severity.errors),
                "warnings": len(detection.by_severity.warnings),
                "info": len(detection.by_severity.info),
            },
            "conflicts": [c.model_dump(mode="json") for c in shown],
            "scopes": [s.value for s in merged.metadata.scopes_included],
        }

        if recommendations and cfg.recommendations:
            with trace_span("generate_recommendations"):
                recs = generate_recommendations(merged, scopes, detection)
            data["recommendations"] = [r.model_dump(mode="json") for r in recs.recommendations]
            data["quick_wins"] = [r.model_dump(mode="json") for r in recs.quick_wins]

        log.info(
            "doctor.complete",
            health_score=detection.health_score,
            assessment=assessment.value,
            conflicts=len(detection.conflicts),
        )
        return ServiceResult(ok=True, op=op, data=data, warnings=resolved.warnings)

    @traced
    def show(self, *, layer: str | None = None) -> ServiceResult:
        """Return the merged configuration, or one merged layer."""
        op = "show"
        layer_type: LayerType | None = None
        if layer is not None:
            try:
                layer_type = LayerType(layer)
            except ValueError:
                return ServiceResult(
                    ok=False,
                    op=op,
                    error=ServiceError(
                        code=ErrorCode.INVALID_LAYER,
                        message=f"Unknown layer: {layer!r}",
                        detail={"choices": [lt.value for lt in LayerType]},
                    ),
                )

        resolved = self._resolve(op)
        if isinstance(resolved, ServiceResult):
            return resolved

        merged = resolved.context.config
        if layer_type is None:
            data: dict[str, Any] = {"config": merged.to_wire()}
        else:
            data = {
                "layer": layer_type.value,
                "content": merged.layer(layer_type).to_wire(),
                "sources": list(merged.metadata.layer_sources.get(layer_type, [])),
            }
        return ServiceResult(ok=True, op=op, data=data, warnings=resolved.warnings)

    @traced
    def sources(self) -> ServiceResult:
        """Report which scopes contributed to each layer."""
        op = "sources"
        resolved = self._resolve(op)
        if isinstance(resolved, ServiceResult):
            return resolved

        merged = resolved.context.config
        layers = [
            {
                "layer": summary.layer.value,
                "scopes": [s.value for s in summary.scopes],
                "sources": summary.sources,
                "has_content": merged.layer(summary.layer).has_content(),
            }
            for summary in scope_summary(resolved.context)
        ]
        return ServiceResult(
            ok=True,
            op=op,
            data={"layers": layers},
            warnings=resolved.warnings,
        )

    @traced
    def scopes(self) -> ServiceResult:
        """Report the scope directories checked and the resolution path."""
        op = "scopes"
        resolved = self._resolve(op)
        if isinstance(resolved, ServiceResult):
            return resolved

        path = scope_resolution_path(resolved.context.scopes.values())
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "cwd": str(resolved.scan.cwd),
                "directories": _directories(resolved.scan),
                "resolution": path.model_dump(mode="json"),
            },
            warnings=resolved.warnings,
        )

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _scan(self) -> ScanResult:
        settings = self._settings
        return scan_scope_directories(
            settings.cwd,
            home=settings.home,
            include_missing=True,
            settings=settings.scopes,
        )

    def _resolve(self, op: str) -> _Resolved | ServiceResult:
        """Scan, load, and resolve; a failed ServiceResult when no scope exists."""
        with trace_span("scan"):
            scan = self._scan()

        if not scan.found:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code=ErrorCode.NO_SCOPES,
                    message="No configuration scope directories found",
                    detail={"checked": _directories(scan)},
                ),
            )

        with trace_span("load"):
            configs, warnings = load_all_scopes(scan)
        with trace_span("resolve"):
            context = create_config_context(configs)

        span = get_current_span()
        if span:
            span.annotate("scopes", [c.scope.value for c in configs])
        return _Resolved(scan=scan, context=context, warnings=warnings)


def _directories(scan: ScanResult) -> list[dict[str, Any]]:
    return [
        {"scope": d.scope.value, "path": str(d.path), "exists": d.exists}
        for d in scan.directories
    ]
