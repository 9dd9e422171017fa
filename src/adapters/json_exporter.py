"""JSON export of summaries and lint reports.

Why JSON:
- Results can be diffed between runs or fed into CI and other tooling.
- It is the machine-readable twin of the Rich tables (`--format json`).

Output is stable UTF-8: sorted keys, two-space indent.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

from pydantic import BaseModel

from core.errors import ExportError


def to_json(model: BaseModel) -> str:
    payload = model.model_dump(mode="json")
    return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def export_json(*, model: BaseModel, output_path: Path) -> Path:
    """Write any domain model as JSON."""

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(to_json(model), encoding="utf-8")
    except OSError as exc:
        raise ExportError(f"Could not write JSON {output_path}: {exc}") from exc
    return output_path


def to_json_list(models: Sequence[BaseModel]) -> str:
    payload = [model.model_dump(mode="json") for model in models]
    return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n"
