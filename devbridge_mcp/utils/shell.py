"""Shell command safety utilities."""


def escape_shell_arg(value: str | None) -> str:
    """Quote a value as a single POSIX shell word.

    The value is always wrapped in single quotes. Embedded single quotes
    become ``'\\''`` (close quote, escaped quote, reopen quote), so the
    result survives any content including ``;``, backticks and whitespace.

    Args:
        value: Raw string, typically a device path chosen by the user

    Returns:
        Shell-safe quoted token; ``''`` for empty or None input
    """
    if not value:
        return "''"
    return "'" + value.replace("'", "'\\''") + "'"
