"""Main entry point for the xml2sql tool."""
import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from xml2sql.core.config import Config, load_config
from xml2sql.core.exceptions import (
    ConfigError,
    DatabaseError,
    InvalidInputError,
    MalformedDocumentError,
    PreconditionFailedError,
    StorageError,
    UnknownFormatError,
    UnsupportedConstructError
)
from xml2sql.core.logging import log_config, setup_logging
from xml2sql.formats.factory import available_formats
from xml2sql.infrastructure.mariadb import MariaDB
from xml2sql.infrastructure.storage import SQLStorage, compressed_path
from xml2sql.services.convert import convert_file
from xml2sql.services.export import Exporter
from xml2sql.ui.console import ConsoleInterface

def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(description="Export database tables to XML and convert XML dumps to SQL")
    parser.add_argument("--config", help="Path to configuration file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Export command
    export_parser = subparsers.add_parser("export", help="Export database tables to an XML dump")
    export_parser.add_argument("--tables", nargs="+", help="Tables to export (default: all tables with the prefix)")
    export_parser.add_argument("--database", help="Database to export from")
    export_parser.add_argument("--prefix", help="Live table prefix replaced by #__")
    export_parser.add_argument("--output", "-o", help="Output file")
    export_parser.add_argument("--with-data", action="store_true", help="Export table data")
    export_parser.add_argument("--no-structure", action="store_true", help="Do not export table structure")
    export_parser.add_argument("--compression", action="store_true", help="Enable compression")

    # Convert command
    convert_parser = subparsers.add_parser("convert", help="Convert an XML dump to SQL")
    convert_parser.add_argument("input", nargs="?", help="XML dump to convert")
    convert_parser.add_argument("--output", "-o", help="Output file (default: named after input and format)")
    convert_parser.add_argument("--format", "-f", help="SQL dialect")
    convert_parser.add_argument("--all-formats", action="store_true", help="Convert to every available dialect")
    convert_parser.add_argument("--prefix", help="Live table prefix substituted for #__")
    convert_parser.add_argument("--sample-data", action="store_true", help="Empty existing tables instead of creating them")
    convert_parser.add_argument("--pretty", action="store_true", help="Reindent the generated SQL")
    convert_parser.add_argument("--compression", action="store_true", help="Enable compression")

    subparsers.add_parser("formats", help="List the available SQL dialects")

    return parser

def run_export(args: argparse.Namespace, config: Config, ui: ConsoleInterface) -> int:
    """Export tables from the database to an XML dump."""
    if args.tables:
        config.export.tables = args.tables
    if args.database:
        config.database.database = args.database
    if args.prefix is not None:
        config.database.prefix = args.prefix
    if args.output:
        config.export.output = args.output
    if args.with_data:
        config.export.with_data = True
    if args.no_structure:
        config.export.with_structure = False
    if args.compression:
        config.export.compression = True

    start_time = time.time()
    storage = SQLStorage()

    with MariaDB(config.database) as db:
        tables = config.export.tables or db.get_table_names(prefixed_only=True)

        exporter = (
            Exporter(db)
            .from_tables(tables)
            .with_structure(config.export.with_structure)
            .with_data(config.export.with_data)
        )

        output = Path(config.export.output)
        with storage.open_for_writing(output, config.export.compression) as stream:
            rows = exporter.write_xml(stream)

    file_path = compressed_path(output, config.export.compression)
    ui.display_export_summary(
        exporter.tables,
        rows,
        str(file_path),
        config.export.with_structure,
        config.export.with_data,
        time.time() - start_time
    )
    logging.info(f"Export written to {file_path}")
    return 0

def run_convert(args: argparse.Namespace, config: Config, ui: ConsoleInterface) -> int:
    """Convert an XML dump to one or all SQL dialects."""
    if args.input:
        config.convert.input = args.input
    if args.output:
        config.convert.output = args.output
    if args.format:
        config.convert.format = args.format
    if args.prefix is not None:
        config.convert.prefix = args.prefix
    if args.sample_data:
        config.convert.sample_data = True
    if args.pretty:
        config.convert.pretty = True
    if args.compression:
        config.convert.compression = True

    if not config.convert.input:
        raise InvalidInputError("No input file given")

    formats = available_formats() if args.all_formats else [config.convert.format]
    if len(formats) > 1 and config.convert.output:
        raise InvalidInputError("--output cannot be used with --all-formats")

    for format_name in formats:
        result = convert_file(
            Path(config.convert.input),
            Path(config.convert.output) if config.convert.output else None,
            format_name,
            prefix=config.convert.prefix,
            sample_data=config.convert.sample_data,
            pretty=config.convert.pretty,
            compression=config.convert.compression
        )
        ui.display_conversion_summary(result, format_name)
        logging.info(f"Output file created at: {result.file_path}")

    return 0

def main(argv: Optional[List[str]] = None) -> int:
    """Run the xml2sql tool.

    Returns:
        int: Exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    ui = ConsoleInterface()

    try:
        config = load_config(args.config)

        setup_logging(config.logging)
        if args.verbose:
            config.logging.level = 'DEBUG'
            setup_logging(config.logging)
            logging.info("Verbose flag detected, switching to DEBUG log level")

        log_config(config)

        if args.command == "export":
            return run_export(args, config, ui)
        if args.command == "convert":
            return run_convert(args, config, ui)

        ui.display_formats(available_formats())
        return 0

    except ConfigError as e:
        logging.error(f"Configuration error: {str(e)}")
        ui.display_error(str(e))
        return 1
    except DatabaseError as e:
        logging.error(f"Database error: {str(e)}")
        ui.display_error(str(e))
        return 1
    except StorageError as e:
        logging.error(f"Storage error: {str(e)}")
        ui.display_error(str(e))
        return 1
    except (InvalidInputError, PreconditionFailedError) as e:
        logging.error(f"Input error: {str(e)}")
        ui.display_error(str(e))
        return 1
    except (MalformedDocumentError, UnknownFormatError, UnsupportedConstructError) as e:
        logging.error(f"Conversion error: {str(e)}")
        ui.display_error(str(e))
        return 1

if __name__ == "__main__":
    sys.exit(main())
