"""In-memory file representation handed to the extraction collaborator."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import Any


@dataclass
class UniformFile:
    """A build output as a virtual file.

    ``path`` is ``base`` joined with the asset name by a single separator;
    ``cwd`` and ``base`` are both the build base path.
    """

    cwd: str
    base: str
    path: str
    contents: bytes

    @property
    def relative(self) -> str:
        """Path relative to ``base``."""
        base = self.base.rstrip("/")
        if base and self.path.startswith(base + "/"):
            return self.path[len(base) + 1 :]
        return self.path.lstrip("/")

    def text(self, encoding: str = "utf-8") -> str:
        return self.contents.decode(encoding)


_UNIFORM_ATTRS = ("cwd", "base", "path", "contents")


def is_uniform(obj: Any) -> bool:
    """Check whether ``obj`` already has the uniform file shape."""
    if isinstance(obj, UniformFile):
        return True
    return not isinstance(obj, (str, bytes)) and all(
        hasattr(obj, attr) for attr in _UNIFORM_ATTRS
    )


def wrap_asset(name: Any, base_path: str | None, contents: bytes) -> Any:
    """Wrap a build asset as a :class:`UniformFile`.

    Objects that are already uniform files are returned unchanged.
    """
    if is_uniform(name):
        return name
    base = base_path or ""
    return UniformFile(
        cwd=base,
        base=base,
        path=posixpath.join(base, name.lstrip("/")),
        contents=bytes(contents),
    )
