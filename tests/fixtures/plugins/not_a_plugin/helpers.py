"""Helper module without a plugin header."""


def helper():
    return 42
