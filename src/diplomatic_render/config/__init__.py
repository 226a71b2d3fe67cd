from .render_config import RenderConfig
from .render_gate_config import RenderGateConfig

__all__ = ["RenderConfig", "RenderGateConfig"]
