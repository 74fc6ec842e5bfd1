"""
Command-line interface for ms-align.
"""

import sys
import argparse
from pathlib import Path

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='ms-align',
        description="Local alignment of queries against a reference k-mer index from k-bounded matching statistics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Build an index from one or more reference files
  %(prog)s build -r ref1.fa ref2.fa.gz -o refs.npz

  # Map queries, writing the run table to a file
  %(prog)s map -i refs.npz -q reads.fq -o runs.tsv

  # Both strands, four worker processes, stricter threshold
  %(prog)s map -i refs.npz -q reads.fa --both-strands --workers 4 --max-error-prob 1e-9

  # Other options
  %(prog)s --version
        """
    )

    # Common options
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        '--config',
        type=str,
        help='Path to configuration YAML file'
    )
    common.add_argument(
        '--output-dir',
        type=str,
        help='Directory for the run report and symbol tracks'
    )
    common.add_argument(
        '--logs-dir',
        type=str,
        help='Directory for pipeline.log and performance reports'
    )
    common.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    common.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug mode'
    )

    parser.add_argument(
        '--version',
        action='store_true',
        help='Show version information'
    )

    subparsers = parser.add_subparsers(dest='command')

    # build
    build = subparsers.add_parser('build', parents=[common], help='Build a reference index')
    build.add_argument(
        '-r', '--references',
        nargs='+',
        metavar='FILE',
        required=True,
        help='Reference FASTA/FASTQ files (optionally gzipped)'
    )
    build.add_argument(
        '-o', '--output',
        required=True,
        metavar='INDEX',
        help='Index output path (.npz is appended when missing)'
    )
    build.add_argument(
        '-k',
        type=int,
        help='k-mer length, at most 31'
    )
    build.add_argument(
        '--add-revcomp',
        action='store_true',
        help='Also index the reverse complement of each reference'
    )

    # map
    map_ = subparsers.add_parser('map', parents=[common], help='Map queries against an index')
    map_.add_argument(
        '-i', '--index',
        required=True,
        metavar='INDEX',
        help='Index built with "ms-align build"'
    )
    map_.add_argument(
        '-q', '--queries',
        nargs='+',
        metavar='FILE',
        required=True,
        help='Query FASTA/FASTQ files (optionally gzipped)'
    )
    map_.add_argument(
        '-o', '--output',
        metavar='TSV',
        help='Run table output (default: stdout)'
    )
    map_.add_argument(
        '--max-error-prob',
        type=float,
        help='Tolerated probability of a random match at the threshold'
    )
    map_.add_argument(
        '--gap-cutoff',
        type=int,
        help='Gaps longer than this are reported as gaps, shorter ones as insertions'
    )
    map_.add_argument(
        '--both-strands',
        action='store_true',
        help='Also map the reverse complement of each query'
    )
    map_.add_argument(
        '--workers',
        type=int,
        help='Number of worker processes (0 = auto)'
    )
    map_.add_argument(
        '--no-multiprocessing',
        action='store_true',
        help='Disable multiprocessing'
    )
    map_.add_argument(
        '--save-symbols',
        action='store_true',
        help='Write the decoded symbol track of each query'
    )

    return parser

def build_overrides(args: argparse.Namespace) -> dict:
    """Translate parsed arguments into nested configuration overrides."""
    config_overrides = {}

    def section(name):
        return config_overrides.setdefault(name, {})

    if args.command == 'build':
        section('io')['reference_files'] = [str(Path(p)) for p in args.references]
        section('io')['index_path'] = args.output
        if args.k is not None:
            section('index')['k'] = args.k
        if args.add_revcomp:
            section('index')['add_revcomp'] = True

    elif args.command == 'map':
        section('io')['index_path'] = args.index
        section('io')['query_files'] = [str(Path(p)) for p in args.queries]
        if args.output:
            section('io')['output_file'] = args.output
        if args.max_error_prob is not None:
            section('translate')['max_error_prob'] = args.max_error_prob
        if args.gap_cutoff is not None:
            section('translate')['gap_length_cutoff'] = args.gap_cutoff
        if args.both_strands:
            section('mapping')['both_strands'] = True
        if args.workers is not None:
            section('performance')['num_workers'] = 'auto' if args.workers == 0 else args.workers
        if args.no_multiprocessing:
            section('performance')['use_multiprocessing'] = False
        if args.save_symbols:
            section('debug')['save_symbols'] = True

    if args.output_dir:
        section('io')['output_dir'] = args.output_dir

    if args.logs_dir:
        section('io')['logs_dir'] = args.logs_dir

    if args.verbose:
        section('debug')['verbose'] = True

    if args.debug:
        section('debug')['log_level'] = 'DEBUG'

    return config_overrides

def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        from ms_align.diagnostics.version_checker import print_version_report
        print_version_report()
        return 0

    if args.command is None:
        parser.print_help()
        return 1

    config_overrides = build_overrides(args)

    try:
        from ms_align.pipeline.main_pipeline import main as pipeline_main
    except ImportError as e:
        print(f"ERROR: Could not import pipeline module: {e}")
        print("Make sure the package is installed correctly.")
        return 1

    try:
        return pipeline_main(config_path=args.config, overrides=config_overrides, command=args.command)
    except Exception as e:
        print(f"Pipeline failed: {e}", file=sys.stderr)
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1

if __name__ == "__main__":
    sys.exit(main())
