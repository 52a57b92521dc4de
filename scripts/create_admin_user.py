# scripts/create_admin_user.py
"""
Create the first master user (and the documents table when missing).

Usage:
    python scripts/create_admin_user.py admin@empresa.com --name "Admin"
"""

import argparse
import getpass
import logging
import sys

from lidera.auth import AuthManager, ROLE_MASTER
from lidera.db import get_db_engine, init_schema
from lidera.errors import StoreError
from lidera.store import DocumentStore

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a Lidera Skills master user")
    parser.add_argument("email")
    parser.add_argument("--name", default="")
    args = parser.parse_args()

    password = getpass.getpass("Senha: ")
    if len(password) < 6:
        logger.error("❌ A senha deve ter ao menos 6 caracteres")
        return 1

    engine = get_db_engine()
    init_schema(engine)

    try:
        user_id = AuthManager(DocumentStore(engine)).create_user(args.email, password, args.name, ROLE_MASTER)
    except StoreError as e:
        logger.error(f"❌ {e}")
        return 1

    logger.info(f"✅ Master user created: {args.email} ({user_id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
