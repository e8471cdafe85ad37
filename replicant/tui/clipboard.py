"""Copy text to the system clipboard, falling back to an OSC 52 sequence."""

from __future__ import annotations

import base64
import shutil
import subprocess
import sys


def osc52_sequence(text: str) -> str:
    """Return the terminal escape sequence that sets the clipboard to text."""
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return f"\x1b]52;c;{encoded}\x07"


def _clipboard_command() -> list[str] | None:
    platform = sys.platform
    if platform == "darwin":
        return ["pbcopy"]
    if platform.startswith("linux"):
        xclip = shutil.which("xclip")
        if xclip:
            return [xclip, "-selection", "clipboard"]
        xsel = shutil.which("xsel")
        if xsel:
            return [xsel, "--clipboard", "--input"]
        return None
    if platform in ("win32", "cygwin"):
        return ["clip.exe"]
    return None


def write_clipboard(text: str) -> bool:
    """Copy text to the clipboard.

    Returns True if a platform clipboard command took the text, False if
    the OSC 52 escape sequence was written to standard output instead.
    """
    command = _clipboard_command()
    if command is not None:
        try:
            subprocess.run(
                command,
                input=text.encode("utf-8"),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=True,
            )
            return True
        except (OSError, subprocess.CalledProcessError):
            pass

    sys.stdout.write(osc52_sequence(text))
    sys.stdout.flush()
    return False