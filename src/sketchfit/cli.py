"""
Command-line interface for sketchfit.

Provides commands for fitting a stroke file and writing a default config.
"""

import argparse
import sys

from sketchfit.config import save_default_config
from sketchfit.tracer import configure_tracer, get_tracer


def build_parser():
    """Argument parser with the run and init-config subcommands."""
    parser = argparse.ArgumentParser(
        prog="sketchfit",
        description="sketchfit: generate line, arc and clothoid candidates for sketched strokes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command
    run_parser = subparsers.add_parser("run", help="Fit candidate primitives to a stroke")
    run_parser.add_argument(
        "--input", "-i",
        required=True,
        help="Stroke JSON file",
    )
    run_parser.add_argument(
        "--out", "-o",
        required=True,
        help="Output directory",
    )
    run_parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file",
    )
    run_parser.add_argument(
        "--debug",
        action="store_true",
        help="Write an SVG of every accepted candidate",
    )
    run_parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable runtime tracing",
    )
    run_parser.add_argument(
        "--trace-level",
        default="INFO",
        choices=["ERROR", "WARN", "INFO", "DEBUG"],
        help="Trace log level",
    )
    run_parser.add_argument(
        "--trace-file",
        default=None,
        help="Path to write trace logs",
    )
    run_parser.add_argument(
        "--trace-json",
        action="store_true",
        help="Enable JSON trace output",
    )

    # Init config command
    init_parser = subparsers.add_parser("init-config", help="Create default config file")
    init_parser.add_argument(
        "--out", "-o",
        default="sketchfit_config.yaml",
        help="Output path for config file",
    )

    return parser


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "run":
        return handle_run(args)
    elif args.command == "init-config":
        return handle_init_config(args)

    return 0


def handle_run(args):
    """Handle the run command."""
    configure_tracer(
        enabled=args.trace,
        level=args.trace_level,
        file_path=args.trace_file,
        json_output=args.trace_json,
    )

    tracer = get_tracer()

    try:
        from sketchfit.pipeline import run_fitting

        with tracer.span("cli_run", module="cli"):
            report = run_fitting(
                input_path=args.input,
                out_dir=args.out,
                config_path=args.config,
                debug=args.debug,
            )

        print("\nFitting completed successfully.")
        print(f"  Samples: {report.stroke.num_samples} ({'closed' if report.stroke.closed else 'open'})")
        print(f"  Corners: {len(report.stroke.corner_indices)}")
        print(f"  Candidates: {len(report.candidates)}")
        for name, count in report.counts.items():
            print(f"    {name}: {count}")
        print(f"\nOutputs saved to: {args.out}/")
        print("  - candidates.json")
        if args.debug:
            print("  - debug/candidates.svg")

        return 0

    except Exception as e:
        tracer.event(f"Fitting failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1

    finally:
        get_tracer().config.close()


def handle_init_config(args):
    """Handle the init-config command."""
    save_default_config(args.out)
    print(f"Default configuration saved to: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
