"""Custom exception hierarchy for vnscript with helpful error messages."""

from __future__ import annotations

from typing import Any


class VNScriptError(Exception):
    """Base exception with helpful formatting for all vnscript errors.

    Provides structured error messages with hints and details to help users
    understand and fix problems.
    """

    def __init__(
        self,
        message: str,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize exception with structured error information.

        Args:
            message: Primary error message describing what went wrong
            hint: Optional hint suggesting how to fix the problem
            details: Optional dictionary with additional debugging information
        """
        self.message = message
        self.hint = hint
        self.details = details
        super().__init__(self.format_error())

    def format_error(self) -> str:
        """Format the error message with hint and details.

        Returns:
            Formatted error string with all available information
        """
        output = f"Error: {self.message}"
        if self.hint:
            output += f"\nHint: {self.hint}"
        if self.details:
            details_str = "\n".join(
                f"  {key}: {value}" for key, value in self.details.items()
            )
            output += f"\nDetails:\n{details_str}"
        return output


class ConfigurationError(VNScriptError):
    """Configuration errors including invalid settings and missing config files."""

    pass


class ScriptSourceError(VNScriptError):
    """Script source could not be read or decoded."""

    pass


class AssetManifestError(VNScriptError):
    """Asset manifest is missing or cannot be parsed."""

    pass


class SessionError(VNScriptError):
    """Playback request that is not valid in the current session state."""

    pass


class MissingStartNodeError(SessionError):
    """The compiled script has no start node to begin a session from."""

    def __init__(self, start_id: str) -> None:
        """Initialize with the start identifier that was looked up.

        Args:
            start_id: Identifier expected to mark the first node
        """
        self.start_id = start_id
        super().__init__(
            message=f"Script has no '{start_id}' node",
            hint="Add a dialogue line before any label, or a '# start' label",
            details={"start_id": start_id},
        )


class InvalidChoiceError(SessionError):
    """Choice selection attempted while no choice is on offer."""

    pass


class SaveError(VNScriptError):
    """Save slot errors."""

    pass


class SaveSlotEmptyError(SaveError):
    """Load requested from a slot that holds no save."""

    def __init__(self, slot_id: int) -> None:
        """Initialize with the empty slot id.

        Args:
            slot_id: Slot that was read
        """
        self.slot_id = slot_id
        super().__init__(message=f"Save slot {slot_id} is empty")


class IncompatibleSaveError(SaveError):
    """Saved position no longer exists in the compiled script."""

    def __init__(self, slot_id: int, node_id: str) -> None:
        """Initialize with the slot and the node it points at.

        Args:
            slot_id: Slot that was read
            node_id: Node identifier stored in the slot
        """
        self.slot_id = slot_id
        self.node_id = node_id
        super().__init__(
            message="Save data is corrupt or incompatible with this script",
            hint="The script may have changed since the save was made",
            details={"slot": slot_id, "node_id": node_id},
        )


class InvalidSlotError(SaveError):
    """Slot id outside the configured range."""

    def __init__(self, slot_id: int, slot_count: int) -> None:
        """Initialize with the rejected slot id and the valid range.

        Args:
            slot_id: Requested slot
            slot_count: Number of slots available
        """
        self.slot_id = slot_id
        self.slot_count = slot_count
        super().__init__(
            message=f"Invalid save slot {slot_id}",
            hint=f"Use a slot between 1 and {slot_count}",
        )


def check_config_keys(config: dict[str, Any]) -> None:
    """Check for common configuration mistakes.

    Args:
        config: Configuration dictionary to validate

    Raises:
        ConfigurationError: With hints about correct configuration keys
    """
    wrong_keys = {
        "assets": "asset_manifest",
        "start": "start_node_id",
        "save_path": "save_file",
        "slots": "save_slot_count",
    }

    for wrong, correct in wrong_keys.items():
        if wrong in config:
            raise ConfigurationError(
                message=f"Invalid configuration key '{wrong}'",
                hint=f"Use '{correct}' instead of '{wrong}'",
                details={
                    "found_keys": list(config.keys()),
                    "invalid_key": wrong,
                    "correct_key": correct,
                },
            )
