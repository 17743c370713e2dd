import json
from pathlib import Path

import pytest

from app.core.tenants import build_ecosystem, build_process_descriptor, discover_tenants


@pytest.fixture()
def backend_dir(tmp_path: Path) -> Path:
    (tmp_path / ".env").write_text("APP_ENV=development\n")
    (tmp_path / ".env.example").write_text("APP_PORT=8000\n")
    (tmp_path / ".env.backup").write_text("APP_PORT=1\n")
    (tmp_path / ".env.backup-2026-10-01").write_text("APP_PORT=2\n")
    (tmp_path / ".env.markt-nord").write_text("APP_PORT=8001\nDB_NAME=nord\n")
    (tmp_path / ".env.markt-sued").write_text("TENANT_NAME=sued\nDB_NAME=sued\n")
    (tmp_path / ".env.leer").mkdir()
    return tmp_path


def test_discover_tenants_ignores_example_and_backups(backend_dir):
    assert discover_tenants(backend_dir) == ["markt-nord", "markt-sued"]


def test_process_descriptor_fields(backend_dir):
    app = build_process_descriptor("markt-nord", backend_dir)

    assert app["name"] == "markt-nord-backend"
    assert app["script"] == "uvicorn"
    assert app["args"] == "app.main:create_app --factory --host 0.0.0.0 --port 8001"
    assert app["cwd"] == str(backend_dir.resolve())
    assert app["instances"] == 1
    assert app["exec_mode"] == "fork"
    assert app["autorestart"] is True
    assert app["watch"] is False
    assert app["max_memory_restart"] == "1G"
    assert app["error_file"] == "logs/markt-nord-error.log"
    assert app["out_file"] == "logs/markt-nord-out.log"
    assert app["log_file"] == "logs/markt-nord-combined.log"


def test_process_env_carries_tenant_file(backend_dir):
    env = build_process_descriptor("markt-nord", backend_dir)["env"]
    assert env["APP_ENV"] == "production"
    assert env["DB_NAME"] == "nord"
    assert env["TENANT_NAME"] == "markt-nord"
    assert env["ENV_FILE"] == str(backend_dir.resolve() / ".env.markt-nord")


def test_tenant_name_from_env_file_wins(backend_dir):
    app = build_process_descriptor("markt-sued", backend_dir)
    assert app["env"]["TENANT_NAME"] == "sued"
    assert app["args"].endswith("--port 8000")


def test_build_ecosystem_is_json_serializable(backend_dir):
    ecosystem = build_ecosystem(backend_dir)
    assert [a["name"] for a in ecosystem["apps"]] == ["markt-nord-backend", "markt-sued-backend"]
    assert json.loads(json.dumps(ecosystem)) == ecosystem


def test_empty_directory_has_no_apps(tmp_path):
    assert build_ecosystem(tmp_path) == {"apps": []}
