"""
grewrite - graph-grammar rewriting core

Derives double-pushout rewrite rules from annotated graphs, enumerates every
embedding of a pattern graph in a target graph, and applies a rule at one
embedding to produce the next derived graph.
"""

__version__ = "0.1.0"

# Expose common submodules for convenience
from .core import *  # noqa: F401,F403
from .generation import *  # noqa: F401,F403
from .rules import *  # noqa: F401,F403
from .utils import *  # noqa: F401,F403
from .utils.interop import from_networkx, to_networkx  # noqa: F401

# Configuration presets as top-level names
from .config import PRESET_MINIMAL, PRESET_STANDARD, PRESET_STRICT  # noqa: F401
