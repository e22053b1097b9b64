from enum import IntEnum
from typing import Union


class ErrorCode(IntEnum):
    REMOVE_CONFLICT = 1
    REMOVE_FAILED = 2
    INSTALL_CONFLICT = 101
    MKDIR_FAILED = 102
    COPY_FAILED = 103
    ACTIVATE_FAILED = 104


UNKNOWN_ERROR = "Unknown error."

ERROR_MESSAGES = {
    ErrorCode.REMOVE_CONFLICT: "Another plugin is already in place. Not going to remove it.",
    ErrorCode.REMOVE_FAILED: "Can't remove compatibility plugin. Can't delete the plugin.",
    ErrorCode.INSTALL_CONFLICT: "Can't install compatibility plugin. Another plugin is already in place.",
    ErrorCode.MKDIR_FAILED: "Can't install compatibility plugin. Can't create the plugin directory.",
    ErrorCode.COPY_FAILED: "Can't install compatibility plugin. Can't copy the plugin file.",
    ErrorCode.ACTIVATE_FAILED: "Can't install compatibility plugin. Can't activate the plugin.",
}


def error_message(code: Union[int, str]) -> str:
    """Admin-facing message for an error code; anything unrecognised is 'Unknown error.'"""
    try:
        return ERROR_MESSAGES[ErrorCode(code)]
    except (ValueError, TypeError):
        return UNKNOWN_ERROR
