from . filesystem_root import FilesystemRoot, empty_directory_node, DEFAULT_MAX_RETRIES
