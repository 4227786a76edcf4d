"""Command request data types for CLI."""

from dataclasses import dataclass, field
from typing import Literal, Optional


@dataclass(frozen=True)
class ListCommand:
    """List files whose name begins with prefix (all files if empty)."""

    prefix: str = ""
    command: Literal["list"] = "list"


@dataclass(frozen=True)
class SearchCommand:
    """List files whose name matches pattern anywhere."""

    pattern: str
    command: Literal["search"] = "search"


@dataclass(frozen=True)
class GetCommand:
    """Download the newest file with this name."""

    filename: str
    local: Optional[str] = None
    command: Literal["get"] = "get"


@dataclass(frozen=True)
class PutCommand:
    """Upload a local file under filename."""

    filename: str
    local: Optional[str] = None
    content_type: Optional[str] = None
    chunk_size: Optional[int] = None
    replace: bool = False
    command: Literal["put"] = "put"

    @property
    def source_path(self) -> str:
        return self.local or self.filename


@dataclass(frozen=True)
class DeleteCommand:
    """Delete every file with this name."""

    filename: str
    command: Literal["delete"] = "delete"


@dataclass(frozen=True)
class HelpCommand:
    """Print extended help."""

    command: Literal["help"] = "help"


CommandRequest = (
    ListCommand
    | SearchCommand
    | GetCommand
    | PutCommand
    | DeleteCommand
    | HelpCommand
)


@dataclass(frozen=True)
class GlobalOptions:
    """Options that pick the store rather than shape one command."""

    database_path: Optional[str] = None
    namespace: Optional[str] = None
    debug: bool = False


@dataclass(frozen=True)
class Invocation:
    command: CommandRequest
    options: GlobalOptions = field(default_factory=GlobalOptions)
