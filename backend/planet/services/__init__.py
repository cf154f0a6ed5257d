"""Service layer.

- editing: editing session lifecycle (start/apply/discard)
- node_gateway: node create/update/delete with backups
- restore: reverse replay of a session's backups
- workspace: planet provisioning and user profiles
- auth_service: bearer token to user resolution
"""

from . import auth_service, editing, node_gateway, restore, workspace

__all__ = [
    "auth_service",
    "editing",
    "node_gateway",
    "restore",
    "workspace",
]
