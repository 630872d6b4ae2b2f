import argparse
import sys
from typing import List, Optional, TextIO

from rich.console import Console
from rich.markup import escape

from fanout import __version__
from fanout.infra.errors import ConfigurationError
from fanout.cli.resolve import resolve_config
from fanout.cli.run import cmd_run


EXIT_CONFIG_ERROR = 1

console = Console(stderr=True)


def create_parser():
    parser = argparse.ArgumentParser(
        prog='fanout',
        description='Run a command once per input line, with N commands running at a time',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Each input line replaces every {} in the command. The line is pasted in
as-is: no quoting or escaping is done, so shell metacharacters in the
input are interpreted by the shell.

Examples:
  # One echo per line of stdin, 4 at a time
  printf 'a\\nb\\nc\\n' | fanout -t 4 echo {}

  # Compress every file listed in files.txt using all CPUs
  fanout -f files.txt gzip -9 {}

  # Verbose progress plus a JSONL log of every invocation
  fanout --verbose --log-file run.jsonl -f urls.txt curl -sO {}

Environment:
  FANOUT_THREADS   default worker count
  FANOUT_CONFIG    config file (default: ~/.config/fanout/config.yaml)
"""
    )

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('-t', '--threads', type=int, default=None, metavar='N',
                        help='Number of commands to run at once (default is to autodetect)')
    parser.add_argument('-f', '--file', default=None, metavar='PATH',
                        help='File to read inputs from, one per line (default is stdin)')
    parser.add_argument('-d', '--debug', action='store_true', help='Set log level to debug')
    parser.add_argument('--verbose', action='store_true', help='Set log level to info')
    parser.add_argument('--log-file', default=None, metavar='PATH',
                        help='Append JSON log records to PATH')
    parser.add_argument('--config', default=None, metavar='PATH',
                        help='YAML config file with defaults')
    parser.add_argument('command', nargs=argparse.REMAINDER,
                        help='Command to run; must contain {} as one of its words')

    return parser


def main(argv: Optional[List[str]] = None, stdin: Optional[TextIO] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = resolve_config(args)
        return cmd_run(config, stdin=stdin)
    except ConfigurationError as e:
        console.print(f"❌ [red]fanout:[/red] {escape(str(e))}", soft_wrap=True)
        return EXIT_CONFIG_ERROR


def run():
    """Console script entry point."""
    sys.exit(main())
