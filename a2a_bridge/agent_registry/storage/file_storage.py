"""File-based registry storage. One JSON file per registered A2A server: <registry_dir>/<id>.json."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ...errors import RegistryStorageError
from ...models import RegisteredServer

logger = logging.getLogger(__name__)

RECORD_SUFFIX = ".json"


def ensure_registry_dir(registry_dir: Path) -> None:
    """
    Create the registry directory (and parents) if missing.

    Raises:
        RegistryStorageError: If the directory cannot be created
    """
    try:
        registry_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise RegistryStorageError(f"Cannot create registry directory {registry_dir}: {e}") from e


def server_path(registry_dir: Path, server_id: str) -> Path:
    """Path of the record file for a (slugged) server id."""
    return registry_dir / f"{server_id}{RECORD_SUFFIX}"


def list_server_files(registry_dir: Path) -> list[Path]:
    """
    List record files in the registry directory, sorted by name.

    Raises:
        RegistryStorageError: If the directory cannot be scanned
    """
    try:
        return sorted(p for p in registry_dir.iterdir() if p.suffix == RECORD_SUFFIX and p.is_file())
    except OSError as e:
        raise RegistryStorageError(f"Cannot scan registry directory {registry_dir}: {e}") from e


def load_server(path: Path) -> Optional[RegisteredServer]:
    """
    Load one registered server from its record file.

    Missing files return None quietly. Unreadable or malformed files are
    logged and also return None, so one bad file never breaks a scan.

    Args:
        path: Record file path

    Returns:
        RegisteredServer, or None if missing/unusable
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as e:
        logger.warning("Failed to read or parse server file %s: %s", path, e)
        return None

    try:
        return RegisteredServer.model_validate(data)
    except ValidationError as e:
        logger.warning("Server file %s is not a valid registration: %s", path, e)
        return None


def save_server(registry_dir: Path, server: RegisteredServer) -> Path:
    """
    Write a registered server to <registry_dir>/<id>.json.

    Writes to a temporary file in the same directory and renames it over
    the target, so readers see either the old or the new record.

    Returns:
        Path of the written file

    Raises:
        RegistryStorageError: If the file cannot be written
    """
    path = server_path(registry_dir, server.id)
    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=registry_dir, prefix=f".{server.id}.", suffix=".tmp", delete=False
        ) as f:
            tmp_name = f.name
            json.dump(server.to_json_dict(), f, indent=2)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise RegistryStorageError(f"Cannot write server file {path}: {e}") from e
    return path


def delete_server(registry_dir: Path, server_id: str) -> bool:
    """
    Delete a server record file.

    Returns:
        True if deleted, False if not found

    Raises:
        RegistryStorageError: If the file exists but cannot be deleted
    """
    path = server_path(registry_dir, server_id)
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        raise RegistryStorageError(f"Cannot delete server file {path}: {e}") from e
    return True
