# CLI argument parsing for tarstream

import argparse
import sys


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        prog="tarstream",
        description="Stream, list, expand and create USTAR archives (plain or gzip).",
    )
    p.add_argument(
        "--archive", "-t",
        dest="archive",
        help="Archive path or http(s) URL to read; output path with --create-from",
    )
    p.add_argument(
        "--list",
        action="store_true",
        help="List archive entries without extracting",
    )
    p.add_argument(
        "--extract-to", "-o",
        dest="extract_to",
        default=None,
        help="Expand the archive into this directory",
    )
    p.add_argument(
        "--find", "-f",
        dest="find",
        help="Extract a single member (e.g., etc/passwd) into --extract-to "
             "or the default output directory",
    )
    p.add_argument(
        "--create-from", "-c",
        dest="create_from",
        help="Create --archive from this file or directory",
    )
    p.add_argument(
        "--gzip", "-z",
        action="store_true",
        help="Treat the archive as gzip-compressed (detected automatically when reading)",
    )
    p.add_argument(
        "--size-of",
        dest="size_of",
        help="Print the size of the uncompressed archive that would be built from this path",
    )
    p.add_argument(
        "--simple-output",
        action="store_true",
        help="Use simple output format instead of ls -la style",
    )
    p.add_argument(
        "--native-skip",
        action="store_true",
        help="Skip entry content with seek() (uncompressed local archives only)",
    )
    p.add_argument(
        "--verify-checksums",
        action="store_true",
        help="Reject headers whose stored checksum does not match",
    )
    p.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress detailed progress output",
    )
    p.add_argument(
        "--log-file", "-l",
        dest="log_file",
        help="Path to save a complete log of output",
    )

    args = p.parse_args(argv)
    # Show help if no mode selected
    if not any([args.list, args.extract_to, args.find, args.create_from, args.size_of]):
        p.print_help()
        sys.exit(0)
    if not args.size_of and not args.archive:
        p.error("--archive is required for this mode")
    return args
