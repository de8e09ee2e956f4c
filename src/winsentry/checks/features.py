"""Optional Windows feature and capability checks."""
from __future__ import annotations

from typing import FrozenSet, Tuple

from ..core.comparison import equals_any
from .base import CategoryChecker
from .types import Method

DISABLED = frozenset({"Disabled"})
ENABLED = frozenset({"Enabled"})
NOT_PRESENT = frozenset({"Not Present"})

# (FeatureStates attribute, control name, accepted states)
FEATURE_CONTROLS: Tuple[Tuple[str, str, FrozenSet[str]], ...] = (
    ("powershell_v2", "PowerShell v2 is disabled", DISABLED),
    ("powershell_v2_engine", "PowerShell v2 Engine is disabled", DISABLED),
    ("work_folders_client", "Work Folders client is disabled", DISABLED),
    ("internet_printing_client", "Internet Printing Client is disabled", DISABLED),
    ("windows_media_player", "Windows Media Player (legacy) is disabled", NOT_PRESENT),
    ("mdag", "Microsoft Defender Application Guard is not present", frozenset({"Disabled", "Unknown"})),
    ("windows_sandbox", "Windows Sandbox is enabled", ENABLED),
    ("hyper_v", "Hyper-V is enabled", ENABLED),
    ("wmic", "WMIC is not present", NOT_PRESENT),
    ("ie_mode", "Internet Explorer mode functionality for Edge is not present", NOT_PRESENT),
    ("legacy_notepad", "Legacy Notepad is not present", NOT_PRESENT),
    ("legacy_wordpad", "WordPad is not present", frozenset({"Not Present", "Unknown"})),
    ("powershell_ise", "PowerShell ISE is not present", NOT_PRESENT),
    ("steps_recorder", "Steps Recorder is not present", NOT_PRESENT),
)


class OptionalWindowsFeaturesCheck(CategoryChecker):
    """Compare DISM feature states against the accepted state of each feature."""

    category = "OptionalWindowsFeatures"
    description = "Checks that legacy features are removed and isolation features are enabled."

    def evaluate(self) -> None:
        states = self.require(self.snapshot.feature_states, "feature_states")
        for attribute, control, accepted in FEATURE_CONTROLS:
            state = getattr(states, attribute)
            self.add(control, control, equals_any(state, accepted), state, Method.DISM)
