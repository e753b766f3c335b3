"""Core data types passed between handlers, actions and patterns."""

from fscrub.models.types import Directories, Directory, FileInfo, Line

__all__ = ["Directories", "Directory", "FileInfo", "Line"]
