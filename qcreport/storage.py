from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .config import get_settings


def output_root() -> Path:
    root = get_settings().output_dir
    root.mkdir(parents=True, exist_ok=True)
    return root


def resolve_output_path(name: str | Path) -> Path:
    path = Path(name)
    if path.is_absolute():
        return path
    return output_root() / path


def write_bytes_atomic(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + '.tmp')
    tmp.write_bytes(content)
    tmp.replace(path)


def read_json(path: Path) -> dict[str, Any]:
    return json.loads(path.read_text(encoding='utf-8'))
