"""CLI entrypoint to run a single Data API action against a collection."""

from __future__ import annotations

import argparse
import json
import logging
import os
import re
import sys
from pathlib import Path
from typing import Any, Optional

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from atlas_client.config import AppConfig, DataApiConfig, TransportConfig
from atlas_client.handler import MongoHandler, mongo_handler
from atlas_client.models import Query

ACTIONS = (
    "find-one",
    "find",
    "find-by-id",
    "update-one",
    "update-many",
    "delete-one",
    "delete-many",
    "insert-one",
    "insert-many",
    "find-one-and-update",
    "find-one-and-delete",
    "find-by-id-and-update",
    "find-by-id-and-delete",
)


def load_env_file(env_path: str = ".env") -> None:
    """Load environment variables from .env file."""
    env_file = Path(ROOT) / env_path
    if not env_file.exists():
        logging.debug(f"Environment file not found: {env_path}")
        return

    logging.info(f"Loading environment from: {env_path}")
    with open(env_file) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, value = line.split("=", 1)
                # Only set if not already in environment
                if key.strip() not in os.environ:
                    os.environ[key.strip()] = value.strip()


def expand_env_vars(data: dict | list | str) -> dict | list | str:
    """Recursively expand ${VAR} and $VAR references in config."""
    if isinstance(data, dict):
        return {key: expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        def replacer(match):
            var_name = match.group(1) or match.group(2)
            return os.environ.get(var_name, match.group(0))

        return re.sub(r'\$\{(\w+)\}|\$(\w+)', replacer, data)
    else:
        return data


def parse_json_arg(value: Optional[str]) -> Any:
    if value is None:
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError as exc:
        raise argparse.ArgumentTypeError(f"Invalid JSON: {exc}") from exc


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run one MongoDB Atlas Data API action")
    parser.add_argument("--database", required=True, help="Target database name")
    parser.add_argument("--collection", required=True, help="Target collection name")
    parser.add_argument("--action", required=True, choices=ACTIONS)
    parser.add_argument("--filter", type=parse_json_arg, help="Filter as JSON")
    parser.add_argument("--sort", type=parse_json_arg, help="Sort spec as JSON")
    parser.add_argument("--update", type=parse_json_arg, help="Update spec as JSON")
    parser.add_argument("--document", type=parse_json_arg, help="Document to insert, as JSON")
    parser.add_argument("--documents", type=parse_json_arg, help="JSON array of documents to insert")
    parser.add_argument("--id", dest="document_id", help="Public document id")
    parser.add_argument("--upsert", action="store_true", help="Insert when nothing matches")
    parser.add_argument(
        "--return-document",
        action="store_true",
        help="Re-fetch inserted documents instead of returning ids",
    )
    parser.add_argument(
        "--updated",
        action="store_true",
        help="Return the document as it is after the update",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Optional path to a JSON config file overriding defaults",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Verbosity for logging output",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to .env file (default: .env)",
    )
    return parser.parse_args(argv)


def load_config(path: Path | None) -> AppConfig:
    if not path:
        return AppConfig(
            data_api=DataApiConfig.from_env(),
            transport=TransportConfig(type="http", params={"timeout": 30, "max_attempts": 1}),
        )
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw_config = json.load(f)

    expanded_config = expand_env_vars(raw_config)
    return AppConfig.from_dict(expanded_config)


def run_action(handler: MongoHandler, args: argparse.Namespace) -> Any:
    query = Query(filter=args.filter, sort=args.sort, update=args.update)
    action = args.action

    if action in ("find-by-id", "find-by-id-and-update", "find-by-id-and-delete") and not args.document_id:
        raise SystemExit(f"--id is required for {action}")

    if action == "find-one":
        return handler.find_one(query)
    if action == "find":
        return handler.find_many(query)
    if action == "find-by-id":
        return handler.find_by_id(args.document_id)
    if action == "update-one":
        return handler.update_one(query, upsert=args.upsert)
    if action == "update-many":
        return handler.update_many(query, upsert=args.upsert)
    if action == "delete-one":
        return handler.delete_one(query)
    if action == "delete-many":
        return handler.delete_many(query)
    if action == "insert-one":
        return handler.insert_one(args.document or {}, return_document=args.return_document)
    if action == "insert-many":
        return handler.insert_many(args.documents or [], return_documents=args.return_document)
    if action == "find-one-and-update":
        return handler.find_one_and_update(query, return_updated=args.updated, upsert=args.upsert).to_dict()
    if action == "find-one-and-delete":
        return handler.find_one_and_delete(query).to_dict()
    if action == "find-by-id-and-update":
        return handler.find_by_id_and_update(
            args.document_id, args.update or {}, return_updated=args.updated, upsert=args.upsert
        ).to_dict()
    return handler.find_by_id_and_delete(args.document_id).to_dict()


def main(argv: Optional[list] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Load environment variables from .env file
    load_env_file(args.env_file)

    config = load_config(args.config)
    handler = mongo_handler(args.database, args.collection, config)
    result = run_action(handler, args)
    print(json.dumps(result, indent=2, default=str))


if __name__ == "__main__":
    main()
