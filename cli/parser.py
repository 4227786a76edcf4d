"""Command-line argument parser for the files tool."""

from typing import Any, Dict, List, Optional

from cli.constants import COMMANDS, FLAG_OPTIONS, VALUE_OPTIONS
from cli.models import (
    CommandRequest,
    DeleteCommand,
    GetCommand,
    GlobalOptions,
    HelpCommand,
    Invocation,
    ListCommand,
    PutCommand,
    SearchCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


class MissingArgumentError(ParseError):
    """Raised when the command or its filename argument is missing."""

    pass


class UnknownCommandError(ParseError):
    """Raised when the command is not one of COMMANDS."""

    pass


def parse_command(args: List[str]) -> Invocation:
    """Parse command-line arguments into an Invocation.

    Options may come before or after the positional arguments and take
    their value either as the next argument or after '='. A bare '--' ends
    option processing.

    Args:
        args: Arguments without the program name

    Returns:
        Invocation holding one CommandRequest and the global options

    Raises:
        ParseError: If an option is malformed or there are too many arguments
        MissingArgumentError: If the command or a required filename is missing
        UnknownCommandError: If the command is not recognised
    """
    values, positionals = _split_args(args)

    options = GlobalOptions(
        database_path=values.get("database_path"),
        namespace=values.get("namespace"),
        debug=values.get("debug", False),
    )

    if values.get("help"):
        return Invocation(command=HelpCommand(), options=options)

    if not positionals or not positionals[0]:
        raise MissingArgumentError("need command")

    command_name = positionals[0]
    filename = positionals[1] if len(positionals) > 1 else ""

    if command_name not in COMMANDS:
        raise UnknownCommandError(f"unknown command '{command_name}'")
    _check_name(filename)

    return Invocation(command=_build_command(command_name, filename, values), options=options)


def _split_args(args: List[str]) -> tuple[Dict[str, Any], List[str]]:
    values: Dict[str, Any] = {}
    positionals: List[str] = []
    only_positionals = False

    i = 0
    while i < len(args):
        arg = args[i]
        i += 1

        if only_positionals or arg == "-" or not arg.startswith("-"):
            positionals.append(arg)
            continue
        if arg == "--":
            only_positionals = True
            continue

        name, sep, inline_value = arg.partition("=")
        if name in FLAG_OPTIONS:
            if sep:
                raise ParseError(f"option {name} does not take a value")
            values[FLAG_OPTIONS[name]] = True
        elif name in VALUE_OPTIONS:
            if sep:
                value = inline_value
            elif i < len(args):
                value = args[i]
                i += 1
            else:
                raise MissingArgumentError(f"option {name} requires a value")
            values[VALUE_OPTIONS[name]] = value
        else:
            raise ParseError(f"unknown option '{name}'")

    if len(positionals) > 2:
        raise ParseError(f"unexpected argument '{positionals[2]}'")

    if "chunk_size" in values:
        values["chunk_size"] = _parse_chunk_size(values["chunk_size"])

    return values, positionals


def _check_name(name: str) -> None:
    # Undecodable bytes in argv arrive as lone surrogates, which the store cannot bind.
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        raise ParseError(f"name {name!r} is not valid UTF-8")


def _parse_chunk_size(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ParseError(f"--chunk-size must be an integer, got '{raw}'")


def _build_command(command_name: str, filename: str, values: Dict[str, Any]) -> CommandRequest:
    if command_name == "help":
        return HelpCommand()
    if command_name == "list":
        return ListCommand(prefix=filename)

    if not filename:
        raise MissingArgumentError("need a filename")

    if command_name == "search":
        return SearchCommand(pattern=filename)
    elif command_name == "get":
        return GetCommand(filename=filename, local=_optional(values, "local"))
    elif command_name == "put":
        return PutCommand(
            filename=filename,
            local=_optional(values, "local"),
            content_type=_optional(values, "content_type"),
            chunk_size=values.get("chunk_size"),
            replace=values.get("replace", False),
        )
    else:
        return DeleteCommand(filename=filename)


def _optional(values: Dict[str, Any], key: str) -> Optional[str]:
    value = values.get(key)
    return value if value else None
