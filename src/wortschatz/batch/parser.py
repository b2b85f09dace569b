"""
YAML parser for batch change requests.

Files are read with ``yaml.safe_load``; the composed node tree is kept
alongside so every change knows the line it starts on.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from .schema import Change, ChangeRequest


class ParseError(Exception):
    """Error parsing a change request file."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        super().__init__(message)


def load_change_request(
    source: Union[str, Path, Dict[str, Any]],
) -> ChangeRequest:
    """Load a change request from a YAML file, YAML string or dictionary.

    Args:
        source: Path to YAML file, YAML string, or parsed dictionary

    Returns:
        ChangeRequest object; changes read from YAML carry their line number

    Raises:
        ParseError: If the content cannot be parsed or is invalid
        FileNotFoundError: If the file does not exist
    """
    if isinstance(source, dict):
        return _build_request(source, [])

    if isinstance(source, Path) or _looks_like_path(source):
        path = Path(source)
        data, lines = _read_file(path)
        return _build_request(data, lines, source_file=path)

    data, lines = _read_yaml(source, empty_message="Empty YAML content")
    return _build_request(data, lines)


def load_yaml_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Load the raw mapping from a request file.

    Raises:
        ParseError: If the file cannot be parsed
        FileNotFoundError: If the file does not exist
    """
    data, _ = _read_file(Path(path))
    return data


def _looks_like_path(text: str) -> bool:
    if "\n" in text:
        return False
    return "/" in text or "\\" in text or text.endswith((".yaml", ".yml"))


def _read_file(path: Path) -> Tuple[Dict[str, Any], List[int]]:
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")
    return _read_yaml(path.read_text(encoding="utf-8"), empty_message="Empty YAML file")


def _read_yaml(text: str, empty_message: str) -> Tuple[Dict[str, Any], List[int]]:
    """Parse YAML text into its root mapping and the line of each change."""
    try:
        node = yaml.compose(text, Loader=yaml.SafeLoader)
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        raise ParseError(
            f"Invalid YAML: {e}", line=mark.line + 1 if mark else None
        ) from e

    if data is None:
        raise ParseError(empty_message)
    if not isinstance(data, dict):
        raise ParseError(
            "YAML root must be a mapping (dictionary)",
            line=node.start_mark.line + 1,
        )
    return data, _change_lines(node)


def _change_lines(root: yaml.Node) -> List[int]:
    """1-based start line of each item under the top-level ``changes`` key."""
    for key, value in root.value:
        if key.value == "changes" and isinstance(value, yaml.SequenceNode):
            return [item.start_mark.line + 1 for item in value.value]
    return []


def _build_request(
    data: Dict[str, Any],
    lines: List[int],
    source_file: Optional[Path] = None,
) -> ChangeRequest:
    session = data.get("session") or {}
    if not isinstance(session, dict):
        raise ParseError("Field 'session' must be a mapping")

    items = data.get("changes")
    if items is None:
        raise ParseError("Missing required field: 'changes'")
    if not isinstance(items, list):
        raise ParseError("Field 'changes' must be a list")
    if not items:
        raise ParseError("Field 'changes' cannot be empty")

    changes: List[Change] = []
    for i, item in enumerate(items):
        line = lines[i] if i < len(lines) else None
        changes.append(_build_change(item, i + 1, line))

    return ChangeRequest(
        changes=changes,
        session_name=session.get("name"),
        session_description=session.get("description"),
        source_file=source_file,
    )


def _build_change(item: Any, number: int, line: Optional[int]) -> Change:
    if not isinstance(item, dict):
        raise ParseError(f"Change #{number} must be a mapping (dictionary)", line=line)

    params = dict(item)
    operation = params.pop("operation", None)
    if not operation:
        raise ParseError(f"Change #{number}: Missing required field 'operation'", line=line)
    if not isinstance(operation, str):
        raise ParseError(f"Change #{number}: Field 'operation' must be a string", line=line)

    return Change(operation=operation, params=params, line_number=line)
