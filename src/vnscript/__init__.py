"""vnscript: a visual novel script compiler and playback engine.

Scripts are written as line-oriented markup, compiled once into a read-only
graph of presentation nodes, and played back by a timed state machine that
drives text reveal, auto play, fast forward, history and save slots.
"""

from .assets import AssetCategory, AssetResolver
from .compiler import CompiledScript, CompileResult, ScriptCompiler, ScriptNode
from .config import VNScriptSettings, get_logger, get_settings
from .engine import ManualScheduler, PlaybackEngine, PlaybackTiming
from .exceptions import VNScriptError
from .storage import JsonFileKeyValueStore, SaveRepository, SaveSlot
from .types import END

__version__ = "0.1.0"
__license__ = "MIT"

__all__ = [
    "END",
    "AssetCategory",
    "AssetResolver",
    "CompileResult",
    "CompiledScript",
    "JsonFileKeyValueStore",
    "ManualScheduler",
    "PlaybackEngine",
    "PlaybackTiming",
    "SaveRepository",
    "SaveSlot",
    "ScriptCompiler",
    "ScriptNode",
    "VNScriptError",
    "VNScriptSettings",
    "__version__",
    "get_logger",
    "get_settings",
]
