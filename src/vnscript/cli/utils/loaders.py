"""Build compilers, resolvers and save repositories from settings."""

from pathlib import Path

from vnscript.assets import AssetResolver
from vnscript.compiler import CompileResult, ScriptCompiler
from vnscript.config import VNScriptSettings
from vnscript.storage import JsonFileKeyValueStore, SaveRepository


def build_resolver(
    settings: VNScriptSettings, assets: Path | None = None
) -> AssetResolver:
    """Load the asset manifest given on the command line or in settings.

    Without either, every asset name is left unresolved.
    """
    manifest = assets or settings.asset_manifest
    if manifest is None:
        return AssetResolver()
    return AssetResolver.from_file(manifest)


def compile_script(
    script_path: Path, settings: VNScriptSettings, assets: Path | None = None
) -> CompileResult:
    compiler = ScriptCompiler(
        build_resolver(settings, assets),
        start_id=settings.start_node_id,
        default_background=settings.default_background,
    )
    return compiler.compile_file(script_path)


def open_saves(
    settings: VNScriptSettings, save_file: Path | None = None
) -> SaveRepository:
    store = JsonFileKeyValueStore(save_file or settings.save_file)
    return SaveRepository(
        store, key=settings.save_key, slot_count=settings.save_slot_count
    )
