#  tarstream main CLI with list, expand, find, create and sizing modes
#  Streams archives from disk or HTTP without buffering whole files
import os
import sys

from rich.console import Console

from tarstream import config
from tarstream.errors import TarStreamError
from tarstream.modules.cli import parse_args
from tarstream.modules.finders import peek_archive, find_entry
from tarstream.modules.formatters import entries_table, format_entry_line, human_readable_size
from tarstream.modules.keepers import TarGzExpander, calculate_tar_size, create_tar, create_tar_gz
from tarstream.modules.streams import SkipStrategy


class Tee:
    """Duplicate stdout/stderr to a file and the console."""
    def __init__(self, *files):
        self.files = files
    def write(self, data):
        for f in self.files:
            f.write(data)
    def flush(self):
        for f in self.files:
            f.flush()


def _gzip_flag(args):
    # --gzip forces decompression; otherwise detect from the source
    return True if args.gzip else None


def _skip_strategy(args) -> SkipStrategy:
    return SkipStrategy.NATIVE if args.native_skip else SkipStrategy.READ_DISCARD


# =============================================================================
# Modes
# =============================================================================

def run_list(args, console: Console) -> int:
    result = peek_archive(
        args.archive,
        gzip=_gzip_flag(args),
        skip_strategy=_skip_strategy(args),
        verify_checksums=args.verify_checksums,
    )

    if args.simple_output:
        for entry in result.entries:
            print(format_entry_line(entry, show_permissions=False))
    else:
        console.print(entries_table(result.entries, title=str(args.archive)))

    if not args.quiet:
        state = "partial" if result.error else "complete"
        print(f"\n  [Stats] Read: {human_readable_size(result.bytes_read)}"
              + (f" (compressed input, {human_readable_size(result.bytes_decompressed)} decompressed)"
                 if result.bytes_decompressed else ""))
        print(f"  [Stats] Files found: {result.entries_found} ({state})")

    if result.error:
        print(f"[!] Error: {result.error}")
        return 1
    return 0


def run_extract(args) -> int:
    expander = TarGzExpander(
        skip_strategy=_skip_strategy(args),
        verify_checksums=args.verify_checksums,
        verbose=not args.quiet,
    )
    if args.gzip:
        result = expander.expand_tar_gz_file(args.archive, args.extract_to)
    else:
        result = expander.expand(args.archive, args.extract_to)

    print(f"[+] Expanded {result.files_written} files "
          f"({human_readable_size(result.bytes_written)}) into {result.destination}")
    return 0


def run_find(args) -> int:
    result = find_entry(args.archive, args.find, gzip=_gzip_flag(args), verbose=not args.quiet)
    if not result.found:
        print(f"[!] {args.find} not found in {args.archive} "
              f"(scanned {result.entries_scanned} entries)")
        return 1

    output_dir = args.extract_to or config.DEFAULT_OUTPUT_DIR
    os.makedirs(output_dir, exist_ok=True)
    out_path = os.path.join(output_dir, os.path.basename(result.entry.name.rstrip("/")))
    with open(out_path, "wb") as f:
        f.write(result.content)

    print(f"[+] Saved {result.entry.name} ({human_readable_size(len(result.content))}) to {out_path}")
    return 0


def run_create(args) -> int:
    verbose = not args.quiet
    if args.gzip:
        result = create_tar_gz(args.create_from, args.archive, verbose=verbose)
    else:
        result = create_tar(args.create_from, args.archive, verbose=verbose)

    print(f"[+] Wrote {args.archive}: {result.files_added} files, "
          f"{result.directories_added} empty directories, "
          f"{human_readable_size(result.archive_bytes)} uncompressed")
    return 0


def run_size_of(args) -> int:
    size = calculate_tar_size(args.size_of)
    if args.quiet:
        print(size)
    else:
        print(f"[*] Archive size for {args.size_of}: {size:,} bytes ({human_readable_size(size)})")
    return 0


def main(argv=None):
    args = parse_args(argv)

    # set up logging/tee if requested
    log_f = None
    stdout, stderr = sys.stdout, sys.stderr
    if args.log_file:
        log_f = open(args.log_file, "w", encoding="utf-8")
        sys.stdout = Tee(sys.stdout, log_f)
        sys.stderr = Tee(sys.stderr, log_f)

    console = Console(file=sys.stdout)

    try:
        if args.size_of:
            code = run_size_of(args)
        elif args.create_from:
            code = run_create(args)
        elif args.find:
            code = run_find(args)
        elif args.list:
            code = run_list(args, console)
        else:
            code = run_extract(args)
    except TarStreamError as e:
        print(f"[!] Error: {e}")
        code = 1
    finally:
        if log_f is not None:
            sys.stdout, sys.stderr = stdout, stderr
            log_f.close()

    sys.exit(code)


if __name__ == "__main__":
    main()
