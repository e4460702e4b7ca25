from standardize_jsdoc.core import (
    BUMP_TYPES,
    FileAccessError,
    InputShapeError,
    find_header,
    merge_header,
    parse_jsdoc_data,
    prepare_jsdoc_data,
    process_file,
    read_file,
)
import sys
import os
import argparse


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Normalize the JSDoc header of source files.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Replace the header of a file, keeping its copyright and license lines
  jsdoc-py update src/app.js '{"file": "app.js", "version": "1.0.0"}'

  # Read the JSDoc data from a file and bump the patch version
  jsdoc-py update src/app.js --data-file header.json --bump patch

  # Fail if the header is not up to date
  jsdoc-py update src/app.js --data-file header.json --check

  # Print the header that would be generated
  jsdoc-py render '{"file": "app.js", "outputs": ["dist/app.js"]}'

  # Print the current header of a file
  jsdoc-py show src/app.js"""
    )

    # Common arguments for all commands
    common_parser = argparse.ArgumentParser(add_help=False)
    common_parser.add_argument(
        '--verbose',
        '-v',
        action='store_true',
        help='Show verbose output including tracebacks on errors'
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to execute', required=True)

    # Update command
    update_parser = subparsers.add_parser(
        'update',
        help='Replace or add the JSDoc header of a file',
        parents=[common_parser]
    )
    update_parser.add_argument(
        'file',
        help='Source file to process'
    )
    add_data_arguments(update_parser)
    update_parser.add_argument(
        '--dry-run',
        '-n',
        action='store_true',
        default=False,
        help='Show the new header without changing the file'
    )
    update_parser.add_argument(
        '--check',
        action='store_true',
        default=False,
        help='Exit with status 1 if the header would change, without writing'
    )
    update_parser.add_argument(
        '--bump',
        '-b',
        choices=BUMP_TYPES,
        help='Bump the version found in the existing header'
    )

    # Render command
    render_parser = subparsers.add_parser(
        'render',
        help='Print the header generated from JSDoc data',
        parents=[common_parser]
    )
    add_data_arguments(render_parser)

    # Show command
    show_parser = subparsers.add_parser(
        'show',
        help='Print the existing JSDoc header of a file',
        parents=[common_parser]
    )
    show_parser.add_argument(
        'file',
        help='Source file to inspect'
    )

    args = parser.parse_args()

    if os.environ.get('JSDOC_PY_VERBOSE') == '1':
        args.verbose = True

    if args.command == 'update':
        return handle_update_command(args)
    elif args.command == 'render':
        return handle_render_command(args)
    elif args.command == 'show':
        return handle_show_command(args)
    else:
        parser.error(f"Unknown command: {args.command}")


def add_data_arguments(parser):
    """Add the arguments of commands taking JSDoc data."""
    parser.add_argument(
        'jsdoc',
        nargs='?',
        metavar='JSON',
        help='JSDoc data as a JSON object'
    )
    parser.add_argument(
        '--data-file',
        '-d',
        metavar='FILE',
        help='Read the JSDoc data from a JSON file ("-" for stdin)'
    )


def load_jsdoc_data(args):
    """Decode the JSDoc data given on the command line or in --data-file."""
    if args.data_file:
        if args.data_file == '-':
            payload = sys.stdin.read()
        else:
            payload = read_file(args.data_file)
    elif args.jsdoc is not None:
        payload = args.jsdoc
    else:
        raise InputShapeError("no JSDoc data given, pass a JSON object or --data-file")
    return parse_jsdoc_data(payload)


def report_error(args, error):
    """Print an error to stderr in the form matching its kind."""
    if isinstance(error, InputShapeError):
        print(f"Error parsing JSDoc JSON: {error}", file=sys.stderr)
    elif error.operation == 'write':
        print(f"Error writing to file {error.path}: {error.reason}", file=sys.stderr)
    else:
        print(f"Error reading file at {error.path}: {error.reason}", file=sys.stderr)

    if args.verbose:
        import traceback
        traceback.print_exc()


def handle_update_command(args):
    """Handle the update command."""
    try:
        jsdoc_data = load_jsdoc_data(args)

        if args.check:
            content = read_file(args.file)
            new_content = merge_header(content, prepare_jsdoc_data(content, jsdoc_data, args.bump))
            if new_content != content:
                print(f"JSDoc header of {args.file} is out of date")
                return 1
            if args.verbose:
                print(f"JSDoc header of {args.file} is up to date")
            return 0

        process_file(
            args.file,
            jsdoc_data,
            args.dry_run,
            args.verbose,
            args.bump
        )
    except (InputShapeError, FileAccessError) as e:
        report_error(args, e)
        return 1

    return 0


def handle_render_command(args):
    """Handle the render command."""
    try:
        jsdoc_data = load_jsdoc_data(args)
    except (InputShapeError, FileAccessError) as e:
        report_error(args, e)
        return 1

    print(merge_header('', jsdoc_data))
    return 0


def handle_show_command(args):
    """Handle the show command."""
    try:
        content = read_file(args.file)
    except FileAccessError as e:
        report_error(args, e)
        return 1

    match = find_header(content)
    if not match:
        print(f"No JSDoc header found in {args.file}")
        return 1

    print(match.group(0).lstrip())
    return 0


if __name__ == '__main__':
    sys.exit(main())
