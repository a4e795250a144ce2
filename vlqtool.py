import argparse
import json
import logging
import sys
import textwrap

from base64vlq import base64vlq_decode, base64vlq_encode
from sourcemap import SourceMap

logger = logging.getLogger(__name__)


def _encode(output, args):
    logger.debug("Encoding %d integers", len(args.values))
    print(base64vlq_encode(args.values), file=output)


def _decode(output, args):
    values = base64vlq_decode(args.vlq)
    if values is None:
        raise ValueError(f"Not a valid Base64 VLQ string: {args.vlq!r}")
    logger.debug("Decoded %d integers from %d characters", len(values), len(args.vlq))
    print(" ".join(map(str, values)), file=output)


def _mappings(output, args):
    with open(args.file) as f:
        sourcemap = SourceMap.from_json(json.load(f))
    logger.debug("Loaded %r from %s", sourcemap, args.file)
    for entry in sourcemap:
        line = f"{entry.line}:{entry.column}"
        if entry.source is not None:
            line += f" -> {entry.source}:{entry.source_line}:{entry.source_column}"
        if entry.name is not None:
            line += f" {entry.name}"
        print(line, file=output)


def main(argv=None, output=None) -> int:
    if output is None:
        output = sys.stdout

    parser = argparse.ArgumentParser(
        prog='vlqtool',
        description='Encode and decode Base64 VLQ strings as used in source maps.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent('''
            Examples:
              vlqtool encode 123 456 789
              vlqtool decode 2HwcqxB
              vlqtool mappings app.js.map
            ''').strip()
    )
    parser.add_argument(
        '--log-level',
        metavar='LEVEL',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Logging is off unless provided.')
    subparsers = parser.add_subparsers(
        dest='command',
        title='Commands',
        required=True,
        help='Use "vlqtool COMMAND --help" for command-specific help'
    )

    parser_encode = subparsers.add_parser(
        'encode',
        help='Encode signed 32-bit integers to a Base64 VLQ string')
    parser_encode.add_argument('values', metavar='N', type=int, nargs='*', help='Integers to encode')
    parser_encode.set_defaults(method=_encode)

    parser_decode = subparsers.add_parser(
        'decode',
        help='Decode a Base64 VLQ string to integers')
    parser_decode.add_argument('vlq', metavar='STRING', help='Base64 VLQ string to decode')
    parser_decode.set_defaults(method=_decode)

    parser_mappings = subparsers.add_parser(
        'mappings',
        help='List the mappings of a version 3 source map file')
    parser_mappings.add_argument('file', metavar='FILE', help='Path to the JSON source map')
    parser_mappings.set_defaults(method=_mappings)

    args = parser.parse_args(argv)

    if args.log_level is not None:
        logging.basicConfig(
            level=getattr(logging, args.log_level),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    try:
        args.method(output, args)
    except (ValueError, OSError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
