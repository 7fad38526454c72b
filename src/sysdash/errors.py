"""Exceptions raised by sysdash."""


class SysdashError(Exception):
    """Base class for sysdash errors."""


class TerminalInitError(SysdashError):
    """The terminal could not be put into full-screen mode."""
