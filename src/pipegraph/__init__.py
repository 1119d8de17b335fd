"""pipegraph: run multi-stage workflows described as DOT graphs."""

from pipegraph.config import EngineConfig
from pipegraph.engine import Engine, HandlerRegistry, PipelineError, RunResult
from pipegraph.handlers import create_default_registry
from pipegraph.parser import ParseError, parse_dot, parse_dot_file

__version__ = "0.1.0"

__all__ = [
    "Engine",
    "EngineConfig",
    "HandlerRegistry",
    "ParseError",
    "PipelineError",
    "RunResult",
    "create_default_registry",
    "parse_dot",
    "parse_dot_file",
    "__version__",
]
