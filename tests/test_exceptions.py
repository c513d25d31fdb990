"""Tests for the vnscript exception hierarchy."""

import pytest

from vnscript.exceptions import (
    AssetManifestError,
    ConfigurationError,
    IncompatibleSaveError,
    InvalidChoiceError,
    InvalidSlotError,
    MissingStartNodeError,
    SaveError,
    SaveSlotEmptyError,
    ScriptSourceError,
    SessionError,
    VNScriptError,
    check_config_keys,
)


class TestVNScriptError:
    def test_message_only(self):
        error = VNScriptError("Something broke")
        assert str(error) == "Error: Something broke"
        assert error.hint is None
        assert error.details is None

    def test_full_format(self):
        error = VNScriptError(
            "Something broke", hint="Try again", details={"file": "a.txt", "line": 3}
        )
        assert error.format_error() == (
            "Error: Something broke\n"
            "Hint: Try again\n"
            "Details:\n"
            "  file: a.txt\n"
            "  line: 3"
        )

    @pytest.mark.parametrize(
        "cls",
        [
            ConfigurationError,
            ScriptSourceError,
            AssetManifestError,
            SessionError,
            SaveError,
        ],
    )
    def test_subclasses_share_base(self, cls):
        assert issubclass(cls, VNScriptError)


class TestSessionErrors:
    def test_missing_start(self):
        error = MissingStartNodeError("prologue")
        assert isinstance(error, SessionError)
        assert error.start_id == "prologue"
        assert "'prologue'" in error.message
        assert error.hint

    def test_invalid_choice_is_session_error(self):
        assert issubclass(InvalidChoiceError, SessionError)


class TestSaveErrors:
    def test_empty_slot(self):
        error = SaveSlotEmptyError(2)
        assert isinstance(error, SaveError)
        assert error.slot_id == 2
        assert error.message == "Save slot 2 is empty"

    def test_incompatible_save(self):
        error = IncompatibleSaveError(1, "gone")
        assert error.details == {"slot": 1, "node_id": "gone"}
        assert "incompatible" in error.message

    def test_invalid_slot(self):
        error = InvalidSlotError(0, 4)
        assert error.slot_id == 0
        assert error.hint == "Use a slot between 1 and 4"


class TestCheckConfigKeys:
    def test_valid_keys_pass(self):
        check_config_keys({"save_slot_count": 3, "asset_manifest": "a.yaml"})

    @pytest.mark.parametrize(
        ("wrong", "correct"),
        [
            ("assets", "asset_manifest"),
            ("start", "start_node_id"),
            ("save_path", "save_file"),
            ("slots", "save_slot_count"),
        ],
    )
    def test_common_mistakes(self, wrong, correct):
        with pytest.raises(ConfigurationError) as exc_info:
            check_config_keys({wrong: "x"})
        assert exc_info.value.details["correct_key"] == correct
        assert correct in exc_info.value.hint
