"""
Prompteng - a prompt template engine with section capture and prompt tests

Prompteng renders Liquid-style templates into a primary text, named sections
(e.g. ``system`` and ``prompt``) and a list of output constraints.
"""

from importlib.metadata import version

from prompteng.engine import EngineOptions, PromptEngine
from prompteng.models import LLMProvider, ModelParam, Provider
from prompteng.rendering.context import Constraint
from prompteng.templates.renderer import RenderResult, TemplateRenderer

__version__ = version("prompteng")

__all__ = [
    "__version__",
    "Constraint",
    "EngineOptions",
    "LLMProvider",
    "ModelParam",
    "PromptEngine",
    "Provider",
    "RenderResult",
    "TemplateRenderer",
]
