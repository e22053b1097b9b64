"""
Decision table for the compatibility toggle.

Every reachable combination of (target value, file exists, file is ours,
plugin is active) maps to exactly one Action, so each transition can be
tested without touching a filesystem.
"""
from enum import Enum, auto
from typing import Dict, NamedTuple, Tuple

YES = "yes"
NO = "no"
TARGET_VALUES = (YES, NO)


class Action(Enum):
    NOOP = auto()
    ACTIVATE = auto()
    INSTALL = auto()
    REMOVE = auto()
    CONFLICT_INSTALL = auto()
    CONFLICT_REMOVE = auto()


class PluginState(NamedTuple):
    file_exists: bool
    is_compat_file: bool = False
    is_active: bool = False

    def normalized(self) -> "PluginState":
        # Ownership and activation mean nothing for a missing file
        if not self.file_exists:
            return PluginState(False, False, False)
        return PluginState(True, bool(self.is_compat_file), bool(self.is_active))


# (target, file_exists, is_compat_file, is_active) -> Action
TRANSITIONS: Dict[Tuple[str, bool, bool, bool], Action] = {
    (YES, True, True, False): Action.ACTIVATE,
    (YES, True, True, True): Action.NOOP,
    (YES, True, False, False): Action.CONFLICT_INSTALL,
    (YES, True, False, True): Action.CONFLICT_INSTALL,
    (YES, False, False, False): Action.INSTALL,
    (NO, False, False, False): Action.NOOP,
    (NO, True, False, False): Action.CONFLICT_REMOVE,
    (NO, True, False, True): Action.CONFLICT_REMOVE,
    (NO, True, True, False): Action.REMOVE,
    (NO, True, True, True): Action.REMOVE,
}


def decide(target: str, state: PluginState) -> Action:
    """Action that brings the stub in line with target; unknown targets do nothing."""
    if target not in TARGET_VALUES:
        return Action.NOOP
    return TRANSITIONS[(target,) + tuple(state.normalized())]
