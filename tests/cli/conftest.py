from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from shoal.core.logging import configure_logging

WriteJson = Callable[[Any], Path]


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    yield
    # The CLI callback binds the JSON sink to the runner's stderr, which is closed afterwards.
    configure_logging()


@pytest.fixture()
def write_json(tmp_path: Path) -> WriteJson:
    def _write(payload: Any) -> Path:
        path = tmp_path / f"input-{len(list(tmp_path.iterdir()))}.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write
