from __future__ import annotations

import json

from sqlalchemy import inspect

from counter_api.cli.__main__ import main
from counter_api.db import mysql_engine, postgres_engine


def test_init_db_creates_table_in_both_stores(capsys):
    assert main(["init-db"]) == 0

    out = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert out["ok"] is True
    assert inspect(postgres_engine).has_table("counter_history")
    assert inspect(mysql_engine).has_table("counter_history")


def test_bump_ascending_prints_reading(capsys):
    assert main(["bump", "ascending"]) == 0

    out = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert out["ok"] is True
    assert out["current_value"] == 1
    assert out["location"] == "test-host"


def test_bump_redis_reports_storage_error(capsys):
    assert main(["bump", "redis"]) == 1

    out = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert out == {"ok": False, "error": "storage_unavailable", "backend": "redis", "detail": out["detail"]}
