from __future__ import annotations

from ..config.render_gate_config import RenderGateConfig
from .services.render_gate_service import RenderGateService

# Module facade over the gate service.
_DEFAULT_SERVICE = RenderGateService()


def run_render_gates(config: RenderGateConfig) -> dict:
    return _DEFAULT_SERVICE.run(config)
