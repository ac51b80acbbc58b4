"""Path algebra for database locations.

Paths are stored normalized: slash-separated segments with no leading or
trailing slash, ``.`` and ``..`` resolved, and the root represented by the
empty string. Two references point at the same location iff their
normalized paths compare equal.
"""

from fireadmin.errors import InvalidArgumentError

_INVALID_SEGMENT_CHARACTERS = frozenset("#$[]")


def split_path(path: str) -> list[str]:
    if not isinstance(path, str):
        raise InvalidArgumentError(f'Invalid path: "{path}". Path must be a string.')

    segments: list[str] = []
    for segment in path.split("/"):
        if not segment or segment == ".":
            continue
        if segment == "..":
            if segments:
                segments.pop()
            continue
        if "." in segment or any(ch in _INVALID_SEGMENT_CHARACTERS for ch in segment):
            raise InvalidArgumentError(f'Invalid path: "{path}". Path contains illegal characters.')
        segments.append(segment)
    return segments


def normalize_path(path: str) -> str:
    return "/".join(split_path(path))


def join_path(base: str, child: str) -> str:
    return normalize_path(f"{base}/{child}")


def parent_path(path: str) -> str | None:
    """Parent of a normalized path; the root has none."""
    if not path:
        return None
    head, _, _ = path.rpartition("/")
    return head


def path_key(path: str) -> str | None:
    """Last segment of a normalized path; the root has no key."""
    if not path:
        return None
    return path.rpartition("/")[2]
