"""
Writing files that hold secrets (private keys, API keys).
"""

import os
from pathlib import Path
from typing import Union


def write_private(path: Union[str, Path], text: str) -> Path:
    """Write ``text`` to ``path`` readable by the owner only.

    The file is created with mode 0600, so its content is never visible to
    other users. A file that already exists is tightened to 0600 before it is
    truncated and rewritten.
    """
    path = Path(path)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        os.fchmod(f.fileno(), 0o600)
        f.write(text)
    return path
