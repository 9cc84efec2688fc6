"""
taskboard/errors.py

Exceptions raised by the permission engine.

Absence of a permission is never an error: it is expressed as a False
capability. Only missing data and programming errors raise.
"""


class PermissionEngineError(Exception):
    """Base class for permission engine errors."""


class NotLoadedError(PermissionEngineError):
    """A predicate was queried before load_context() ran."""

    def __init__(self, message: str = "Permission context not loaded. Call load_context() first."):
        super().__init__(message)


class ContextAlreadyLoadedError(PermissionEngineError):
    """load_context() was called again for a different user or target."""

    def __init__(self, loaded: tuple, requested: tuple):
        self.loaded = loaded
        self.requested = requested
        super().__init__(
            f"Permission context already loaded for {loaded}; "
            f"create a new checker for {requested}"
        )


class ProjectNotFoundError(PermissionEngineError, LookupError):
    """Referenced project does not exist."""

    def __init__(self, project_ref: str):
        self.project_ref = project_ref
        super().__init__(f"Project not found: {project_ref}")


class TeamNotFoundError(PermissionEngineError, LookupError):
    """Referenced team does not exist."""

    def __init__(self, team_ref: str):
        self.team_ref = team_ref
        super().__init__(f"Team not found: {team_ref}")
