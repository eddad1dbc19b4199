"""
Archive packing for multi-file artifacts.
"""

import base64
import io
import zipfile
from typing import Iterable, Tuple


def pack_files(files: Iterable[Tuple[str, str]]) -> str:
    """
    Packs (name, content) pairs into a deflated zip and returns the archive
    bytes base64-encoded. Later duplicates of a name replace earlier ones.
    """
    unique = {}
    for name, content in files:
        unique[name.lstrip("/")] = content

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, content in unique.items():
            archive.writestr(name, content)
    return base64.b64encode(buffer.getvalue()).decode("ascii")
