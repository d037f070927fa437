"""stepgraph package initialization.

Exposes the entry points host applications use: build a :class:`Model` for
a :class:`Plugin`, compile it into a :class:`Program` and call ``run``.
"""

from .exec.outcome import Fault
from .exec.program import Program, RunResult
from .graph.model import Model
from .plugin import Plugin, PluginTypes

__all__ = ["Fault", "Model", "Plugin", "PluginTypes", "Program", "RunResult"]
