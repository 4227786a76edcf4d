"""CLI constants: command names, usage and help text."""

PROG_NAME = "files"

COMMANDS = ["list", "search", "put", "get", "delete", "help"]

# Options that take a value, mapped to the attribute they set.
VALUE_OPTIONS = {
    "-l": "local",
    "--local": "local",
    "-t": "content_type",
    "--type": "content_type",
    "-s": "chunk_size",
    "--chunk-size": "chunk_size",
    "-d": "database_path",
    "--db": "database_path",
    "-n": "namespace",
    "--namespace": "namespace",
}

FLAG_OPTIONS = {
    "-r": "replace",
    "--replace": "replace",
    "--debug": "debug",
    "-h": "help",
    "--help": "help",
}

USAGE = f"usage: {PROG_NAME} [options] command [gridfs filename]\n"

HELP_TEXT = USAGE + """
Browse and modify a GridFS filesystem.

command:
  one of (list|search|put|get|delete)
  list - list all files.  'gridfs filename' is an optional prefix
         which listed filenames must begin with.
  search - search all files. 'gridfs filename' is a substring
           which listed filenames must contain.
  put - add a file with filename 'gridfs filename'
  get - get a file with filename 'gridfs filename'
  delete - delete all files with filename 'gridfs filename'

options:
  -l, --local <path>        local filename for put|get (default is to use the
                            same name as 'gridfs filename'; '-' is stdin/stdout)
  -t, --type <mime>         MIME type for put (default is to omit)
  -r, --replace             remove other files with same name after put
  -s, --chunk-size <bytes>  chunk size for storing files (0 = default)
  -d, --db <path>           database file
  -n, --namespace <name>    collection namespace (default 'fs')
  --debug                   enable debug logging
  -h, --help                show this help
"""
