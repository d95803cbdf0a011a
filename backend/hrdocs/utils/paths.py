import re

MAX_SEGMENT_LENGTH = 50

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_-]")
_DASH_RUN_RE = re.compile(r"-{2,}")


def sanitize_segment(name: str, max_length: int = MAX_SEGMENT_LENGTH) -> str:
    """Make a folder name safe for a drive path: [A-Za-z0-9_-] only, dash runs collapsed."""
    cleaned = _UNSAFE_RE.sub("-", name.strip())
    cleaned = _DASH_RUN_RE.sub("-", cleaned).strip("-")
    return cleaned[:max_length]


def split_path(path: str) -> list[str]:
    return [p for p in path.split("/") if p]


def join_path(*segments: str) -> str:
    return "/" + "/".join(s.strip("/") for s in segments if s and s.strip("/"))


def parent_and_name(path: str) -> tuple[str, str]:
    """'/a/b/c' -> ('/a/b', 'c'); a top-level folder has parent ''."""
    segments = split_path(path)
    if not segments:
        raise ValueError("Cannot take the parent of the drive root")
    parent = join_path(*segments[:-1]) if len(segments) > 1 else ""
    return parent, segments[-1]
