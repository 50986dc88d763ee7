from .file_storage import (
    delete_server,
    ensure_registry_dir,
    list_server_files,
    load_server,
    save_server,
    server_path,
)

__all__ = [
    "delete_server",
    "ensure_registry_dir",
    "list_server_files",
    "load_server",
    "save_server",
    "server_path",
]
