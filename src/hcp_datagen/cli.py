"""
Command-line entry point: hcp-datagen / python -m hcp_datagen.
"""

import argparse
import os
import sys
from datetime import date
from pathlib import Path

from .config import DEFAULT_HCPS, DEFAULT_MONTHS, DEFAULT_SEED, GenerationConfig
from .errors import HCPDataGenError
from .pipeline import HCPDataGenerator
from .storage import InMemoryStore, PostgresStore

OUTPUT_PATH = Path("seed.sql")
DSN_ENV_VAR = "HCP_DATAGEN_DSN"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="hcp-datagen",
        description="Generate synthetic HCP engagement data.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  # Generate 2,000 HCPs and write seed.sql
  hcp-datagen

  # Small, fixed run without writing anything
  hcp-datagen --hcps 500 --months 6 --as-of 2025-06-30 --validate-only

  # Regenerate activity in PostgreSQL, keeping HCP profiles
  hcp-datagen --dsn postgresql://localhost/hcp --additive

  # Settings from a YAML file (flags still win)
  hcp-datagen --config run.yaml --seed 7

PostgreSQL is used when --dsn or ${DSN_ENV_VAR} is set.
""",
    )

    parser.add_argument("--seed", type=int, help=f"Random seed (default: {DEFAULT_SEED})")
    parser.add_argument("--hcps", type=int, help=f"Number of HCPs (default: {DEFAULT_HCPS})")
    parser.add_argument(
        "--months", type=int, help=f"Months of activity to model (default: {DEFAULT_MONTHS})"
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--wipe", action="store_true", help="Delete all existing data first")
    mode.add_argument(
        "--additive",
        action="store_true",
        help="Keep HCP profiles, regenerate all activity data",
    )

    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Validate the data already in the store without generating",
    )
    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        metavar="YYYY-MM-DD",
        help="Reference date the window ends at (default: today)",
    )
    parser.add_argument("--batch-size", type=int, help="Rows per insert batch (default: 500)")
    parser.add_argument("--config", type=Path, help="YAML file with run settings")
    parser.add_argument("--dsn", help=f"PostgreSQL DSN (default: ${DSN_ENV_VAR})")
    parser.add_argument(
        "--output",
        type=Path,
        help=f"Write a COPY seed file here (default: {OUTPUT_PATH} when no DSN is set)",
    )
    parser.add_argument(
        "--skip-validation",
        action="store_true",
        help="Skip validation checks after generation",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> GenerationConfig:
    """Dataclass defaults, then the YAML file, then explicit flags."""
    overrides = {
        "seed": args.seed,
        "hcps": args.hcps,
        "months": args.months,
        "wipe": args.wipe or None,
        "additive": args.additive or None,
        "validate_only": args.validate_only or None,
        "as_of": args.as_of,
        "batch_size": args.batch_size,
        "dsn": args.dsn or os.environ.get(DSN_ENV_VAR),
    }
    if args.config is not None:
        return GenerationConfig.from_yaml(args.config, **overrides)
    return GenerationConfig(**{k: v for k, v in overrides.items() if v is not None})


def main(argv: list[str] | None = None) -> int:
    """
    Generate HCP data with CLI interface.

    Returns:
        0 on success, 1 on a generation error or validation failure
    """
    args = parse_args(argv)
    store = None
    try:
        config = build_config(args)
        store = PostgresStore(config.dsn) if config.dsn else InMemoryStore()
        generator = HCPDataGenerator(config, store)

        if config.validate_only:
            generator.load_all()
        else:
            generator.run()

        if not args.skip_validation:
            results = generator.validate()
            all_passed = all(passed for passed, _ in results.values())
        else:
            all_passed = True
            print("\nValidation skipped.")

        if not config.validate_only and (args.output is not None or not config.dsn):
            output = args.output or OUTPUT_PATH
            generator.write_sql(output)
            print(f"\nOutput: {output}")
    except HCPDataGenError as e:
        print(f"\nError: {e}", file=sys.stderr)
        return 1
    finally:
        if isinstance(store, PostgresStore):
            store.close()

    if all_passed:
        print("\nSuccess!")
        return 0
    print("\nValidation failed. Review errors above.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
