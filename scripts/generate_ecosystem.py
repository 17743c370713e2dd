#!/usr/bin/env python3
"""
Generate the PM2 ecosystem file with one backend process per tenant.

Tenants are discovered from .env.<tenant> files in the backend directory
(.env.example and .env.backup* are ignored).

Usage:
    python scripts/generate_ecosystem.py [--backend-dir DIR] [--output ecosystem.json]
    pm2 start ecosystem.json
"""

import sys
import json
import argparse
from pathlib import Path

# add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.core.tenants import build_ecosystem
import logging

# configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Generate PM2 ecosystem.json for all tenants")
    parser.add_argument("--backend-dir", type=Path, default=project_root, help="Directory holding the .env.<tenant> files")
    parser.add_argument("--output", type=Path, default=project_root / "ecosystem.json", help="Output file")
    args = parser.parse_args(argv)

    if not args.backend_dir.is_dir():
        logger.error(f"Backend directory not found: {args.backend_dir}")
        return 1

    ecosystem = build_ecosystem(args.backend_dir)
    if not ecosystem["apps"]:
        logger.warning("No tenant env files (.env.<tenant>) found")

    args.output.write_text(json.dumps(ecosystem, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    for app in ecosystem["apps"]:
        logger.info(f"Process: {app['name']}")
    logger.info(f"Wrote {len(ecosystem['apps'])} process definition(s) to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
