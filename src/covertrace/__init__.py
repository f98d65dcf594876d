"""
covertrace - input-document coverage for policy evaluation

Records which parts of an input document a policy actually read while it
was evaluated, by tagging document nodes with their paths and watching the
evaluation engine's trace events.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("covertrace")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)
__author__ = "Covertrace Contributors"

from covertrace.codec import PathEncodeError, decode_path, encode_path  # noqa: E402
from covertrace.config import Settings  # noqa: E402
from covertrace.paths import Path, Segment  # noqa: E402
from covertrace.report import CoverageReport, build_report  # noqa: E402
from covertrace.tracing import CoverageTracer, DocumentDecorator  # noqa: E402
from covertrace.trie import PathTrie  # noqa: E402

__all__ = [
    "__version__",
    "__version_info__",
    "CoverageReport",
    "CoverageTracer",
    "DocumentDecorator",
    "Path",
    "PathEncodeError",
    "PathTrie",
    "Segment",
    "Settings",
    "build_report",
    "decode_path",
    "encode_path",
]
