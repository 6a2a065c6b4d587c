"""srsglass -- region update timesheet generator.

Pipeline: Download/Reuse Dump -> Parse -> Membership Lists -> Dump Date
          -> Estimate + Classify -> Write Timesheet

Usage:
    python -m srsglass.main -n Testlandia                 # Download dump, write timesheet
    python -m srsglass.main -n Testlandia -d              # Reuse ./regions.xml.gz if present
    python -m srsglass.main -n Testlandia --precision 2   # Offsets to 1/100 s
    python -m srsglass.main -n Testlandia --major 5400 --minor 3600 -o sheet.xlsx
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import aiohttp

from srsglass import __version__
from srsglass.analysis.dump_date import dump_date
from srsglass.analysis.estimator import format_elapsed
from srsglass.config import RunSettings, build_settings, load_config
from srsglass.dump.parser import parse_dump_file
from srsglass.dump.reader import reusable_dump
from srsglass.errors import SrsglassError
from srsglass.paths import default_outfile
from srsglass.reports.assembly import assemble
from srsglass.reports.timesheet import TimesheetWriter
from srsglass.schemas.models import Dump
from srsglass.scrapers.nationstates import NationStatesScraper

logger = logging.getLogger(__name__)


def obtain_dump(settings: RunSettings, scraper: NationStatesScraper) -> Path:
    """Return a dump on disk, downloading it unless an existing one may be reused."""
    if settings.use_dump:
        existing = reusable_dump(settings.dump_path)
        if existing is not None:
            logger.info("Using existing data dump %s", existing)
            return existing
        logger.warning("No usable dump at %s, downloading instead", settings.dump_path)
    return asyncio.run(scraper.download_dump(settings.dump_path))


def load_dump(settings: RunSettings, config: dict) -> Dump:
    """Fetch and parse everything a timesheet needs (Ingest + Parse + Membership)."""
    scraper = NationStatesScraper(settings.user_agent, config)

    # Stage 1-2: dump
    dump_path = obtain_dump(settings, scraper)
    parsed = parse_dump_file(dump_path)

    # Stage 3: membership lists
    ungoverned, unsecured = asyncio.run(scraper.fetch_membership())

    # Stage 4: dump date
    date = dump_date(parsed.regions, settings.timezone)
    logger.info("Dump date: %s", date.isoformat())

    return Dump(
        regions=parsed.regions,
        total_population=parsed.total_population,
        ungoverned=ungoverned,
        unsecured=unsecured,
        dump_date=date,
    )


def run_pipeline(settings: RunSettings, config: dict) -> Path:
    """Run the full pipeline and return the timesheet path."""
    dump = load_dump(settings, config)

    # Stage 5: estimate + classify
    timesheet = assemble(
        dump,
        major_length=settings.major_length,
        minor_length=settings.minor_length,
        precision=settings.precision,
    )
    if timesheet.rows:
        last = timesheet.rows[-1]
        logger.info(
            "Last region %s: minor %s, major %s",
            last.name,
            format_elapsed(last.minor.total_seconds(), settings.precision),
            format_elapsed(last.major.total_seconds(), settings.precision),
        )

    # Stage 6: write
    outfile = settings.outfile or default_outfile(dump.dump_date.isoformat())
    return TimesheetWriter().write(timesheet, outfile)


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="srsglass -- generate NationStates region update timesheets"
    )
    parser.add_argument("-n", "--nation", dest="user_nation", required=True,
                        help="The name of your nation, to identify you to NationStates")
    parser.add_argument("-o", "--outfile", type=Path,
                        help="Name of the output file [default: srsglassYYYY-MM-DD.xlsx]")
    parser.add_argument("--major", dest="major_length", type=int,
                        help="Length of major update, in seconds [default: 5350]")
    parser.add_argument("--minor", dest="minor_length", type=int,
                        help="Length of minor update, in seconds [default: 3550]")
    parser.add_argument("-d", "--dump", dest="use_dump", action="store_true",
                        help="Use the existing data dump instead of downloading")
    parser.add_argument("-p", "--path", dest="dump_path", type=Path,
                        help="Path to the data dump [default: regions.xml.gz]")
    parser.add_argument("--precision", type=int,
                        help="Number of sub-second digits in update times, 0-3 [default: 0]")
    parser.add_argument("--config", type=Path, help="Path to a srsglass_config.json")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        config = load_config(args.config)
        settings = build_settings(
            config,
            user_nation=args.user_nation,
            outfile=args.outfile,
            major_length=args.major_length,
            minor_length=args.minor_length,
            use_dump=args.use_dump,
            dump_path=args.dump_path,
            precision=args.precision,
        )
        logger.info("Running srsglass with user nation %s", settings.user_nation)
        outfile = run_pipeline(settings, config)
    except SrsglassError as e:
        logger.error("%s", e)
        sys.exit(1)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.error("Could not reach NationStates: %s", e)
        sys.exit(1)
    except OSError as e:
        logger.error("File error: %s", e)
        sys.exit(1)

    print(f"\nSaved timesheet to {outfile}")


if __name__ == "__main__":
    main()
