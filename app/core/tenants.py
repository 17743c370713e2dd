"""
Multi-tenant process descriptors.

Every tenant has its own env file next to the backend (``.env.<tenant>``).
This module finds those files and builds one PM2 app definition per tenant;
scripts/generate_ecosystem.py writes them out as ecosystem.json.
"""
from pathlib import Path
from typing import Any, Dict, List

from dotenv import dotenv_values

ENV_PREFIX = ".env."
IGNORED_ENV_FILES = {".env.example"}
BACKUP_PREFIX = ".env.backup"


def discover_tenants(backend_dir: Path) -> List[str]:
    """tenant names from .env.<tenant> files, sorted."""
    tenants = []
    for path in Path(backend_dir).iterdir():
        name = path.name
        if not path.is_file() or not name.startswith(ENV_PREFIX):
            continue
        if name in IGNORED_ENV_FILES or name.startswith(BACKUP_PREFIX):
            continue
        tenant = name[len(ENV_PREFIX):]
        if tenant:
            tenants.append(tenant)
    return sorted(tenants)


def build_process_descriptor(tenant: str, backend_dir: Path) -> Dict[str, Any]:
    backend_dir = Path(backend_dir).resolve()
    env_file = backend_dir / f"{ENV_PREFIX}{tenant}"
    env_vars = {k: v for k, v in dotenv_values(env_file).items() if v is not None}

    return {
        "name": f"{tenant}-backend",
        "script": "uvicorn",
        "args": "app.main:create_app --factory --host 0.0.0.0 --port " + env_vars.get("APP_PORT", "8000"),
        "interpreter": "none",
        "cwd": str(backend_dir),
        "instances": 1,
        "exec_mode": "fork",
        "env": {
            "APP_ENV": "production",
            **env_vars,
            "TENANT_NAME": env_vars.get("TENANT_NAME", tenant),
            "ENV_FILE": str(env_file),
        },
        "error_file": f"logs/{tenant}-error.log",
        "out_file": f"logs/{tenant}-out.log",
        "log_file": f"logs/{tenant}-combined.log",
        "time": True,
        "autorestart": True,
        "watch": False,
        "max_memory_restart": "1G",
        "merge_logs": True,
        "kill_timeout": 5000,
    }


def build_ecosystem(backend_dir: Path) -> Dict[str, List[Dict[str, Any]]]:
    return {"apps": [build_process_descriptor(t, backend_dir) for t in discover_tenants(backend_dir)]}
