"""Filesystem helpers."""

from __future__ import annotations

import json
import os
from pathlib import Path


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def read_yaml(path: Path):
    import yaml

    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def dump_json(payload, *, sort_keys: bool = True) -> str:
    # allow_nan=False keeps NaN/inf out of every published file.
    return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=sort_keys, allow_nan=False) + "\n"


def write_json(path: Path, payload, *, sort_keys: bool = True) -> None:
    ensure_dir(path.parent)
    tmp_path = path.with_name(f".{path.name}.tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        f.write(dump_json(payload, sort_keys=sort_keys))
    os.replace(tmp_path, path)


def read_json(path: Path):
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)
