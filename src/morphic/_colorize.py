"""Color codes for command line output.

Messages are written with \\-X- codes that become ANSI escapes when the
output stream is a terminal, and are removed otherwise.

    \\-r-  red        \\-g-  green      \\-y-  yellow     \\-c-  cyan
    \\-s-  strong     \\-d-  dim        \\-n-  normal (reset all)

Codes combine, "\\-rs-" is strong red. Setting the NO_COLOR environment
variable disables colors.
"""

__all__ = ["colorize", "apply_ansi", "strip_codes", "should_use_color"]

import os
import re


CODES = {
    "r": "\033[31m",
    "g": "\033[32m",
    "y": "\033[33m",
    "c": "\033[36m",
    "s": "\033[1m",
    "d": "\033[2m",
    "n": "\033[0m",
}

COLOR_CODE_PATTERN = re.compile(r"\\-([rgycsdn]+)-")


def apply_ansi(text):
    """Replace color codes with ANSI escapes, resetting at the end.

    Args:
        text: (str) Text with \\-X- codes

    Returns:
        (str) Text with ANSI escapes
    """
    result, count = COLOR_CODE_PATTERN.subn(
        lambda match: "".join(CODES[c] for c in match.group(1)), text)
    if count:
        result += CODES["n"]
    return result


def strip_codes(text):
    """(str) Text with all color codes removed."""
    return COLOR_CODE_PATTERN.sub("", text)


def should_use_color(stream):
    """Check if a stream should get colored output.

    Args:
        stream: Output stream like sys.stdout

    Returns:
        (bool) True for terminals, unless NO_COLOR is set
    """
    if os.environ.get("NO_COLOR") is not None:
        return False
    try:
        return stream.isatty()
    except AttributeError:
        return False


def colorize(text, stream):
    """(str) Text with codes applied or removed to suit the stream."""
    if should_use_color(stream):
        return apply_ansi(text)
    return strip_codes(text)
