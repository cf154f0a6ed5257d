from .schemas import (
    ActionResponse,
    BackupOut,
    MarkdownUpload,
    NodeCreate,
    NodeDeleteResponse,
    NodeOut,
    NodeUpdate,
    PlanetOut,
    PlanetRename,
    ProfileUpdate,
    SessionOut,
    SessionStartResponse,
    SessionStatusResponse,
    UserProfile,
)

__all__ = [
    "NodeCreate",
    "NodeUpdate",
    "MarkdownUpload",
    "NodeOut",
    "NodeDeleteResponse",
    "SessionOut",
    "SessionStartResponse",
    "SessionStatusResponse",
    "ActionResponse",
    "BackupOut",
    "PlanetOut",
    "PlanetRename",
    "UserProfile",
    "ProfileUpdate",
]
