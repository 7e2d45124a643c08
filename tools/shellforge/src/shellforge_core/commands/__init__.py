from .generation import command_build
from .inspection import command_hash_key, command_list_commands, command_schema, command_validate

__all__ = [
    "command_build",
    "command_hash_key",
    "command_list_commands",
    "command_schema",
    "command_validate",
]
