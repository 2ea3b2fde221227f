#!/usr/bin/env python3
"""
Main entry point for the OCR Feedback Parser.

This script extracts labelled feedback (Positive / Needs Improvement /
Observational) from transcribed or scanned feedback sheets in a folder and
stores one row per feedback item in an Excel file.

Usage:
    python main.py input_folder output_file.xlsx --candidate ID --module ID --session TYPE [options]

Examples:
    # Basic usage
    python main.py ./sheets ./output/feedback.xlsx --candidate C-042 --module ethics --session lecture

    # Preview what would be extracted without touching the workbook
    python main.py ./sheets ./output/feedback.xlsx --candidate C-042 --module ethics --session social --dry-run

    # Process single file
    python main.py ./sheets ./output/feedback.xlsx --candidate C-042 --module empathy --session lecture \
        --single-file sheet1.png

    # Report unterminated labels and save a processing report
    python main.py ./sheets ./output/feedback.xlsx --candidate C-042 --module empathy --session lecture \
        --strict --report-file ./reports/processing_report.json

Environment Variables (only needed for image/PDF inputs):
    GOOGLE_VISION_API_KEY or GOOGLE_VISION_ACCESS_TOKEN

Optional Environment Variables:
    GOOGLE_VISION_API_URL: Annotate endpoint
    MAX_RETRIES: Maximum API retry attempts (default: 3)
    RETRY_DELAY: Base retry delay in seconds (default: 1)
    REQUEST_TIMEOUT: API request timeout in seconds (default: 30)
    MAX_FILE_SIZE_MB: Maximum file size in MB (default: 10)
    MIN_BODY_LENGTH: Shortest feedback text kept (default: 4)
    DEDUP_PREFIX_LENGTH: Characters compared when skipping duplicates (default: 20)
    STRICT_MODE: Report unterminated labels (default: false)
    DEFAULT_AUTHOR: Author stored when --author is not given (default: Anonymous)
    LOG_LEVEL: Logging level (default: INFO)
"""

import sys
import json
import argparse
from pathlib import Path
from typing import List

from ocr_feedback_parser import __version__
from ocr_feedback_parser.config.config_manager import ConfigManager, ConfigurationError
from ocr_feedback_parser.models.feedback_data import ProcessingResult, SessionContext
from ocr_feedback_parser.models.modules import get_module_ids, get_session_types
from ocr_feedback_parser.services.file_scanner import FileScanner


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command-line argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="ocr-feedback-parser",
        description="Extract labelled feedback from OCR'd feedback sheets into Excel",
        epilog="""
Examples:
  %(prog)s ./sheets ./output/feedback.xlsx --candidate C-042 --module ethics --session lecture
  %(prog)s ./sheets ./output/feedback.xlsx --candidate C-042 --module ethics --session social --dry-run
  %(prog)s ./sheets ./output/feedback.xlsx --candidate C-042 --module ethics --session lecture --single-file a.png
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    # Required arguments
    parser.add_argument(
        "input_folder",
        help="Path to folder containing feedback inputs (TXT, PNG, JPG, WEBP, PDF)"
    )
    parser.add_argument(
        "output_file",
        help="Path to output Excel file (.xlsx extension recommended)"
    )

    # Session context
    parser.add_argument(
        "--candidate",
        required=True,
        metavar="ID",
        help="Candidate the feedback is about"
    )

    parser.add_argument(
        "--module",
        required=True,
        metavar="ID",
        help=f"Training module ({', '.join(get_module_ids())})"
    )

    parser.add_argument(
        "--session",
        required=True,
        choices=get_session_types(),
        help="Session type"
    )

    parser.add_argument(
        "--author",
        metavar="NAME",
        help="Author stored with each entry (default: DEFAULT_AUTHOR or Anonymous)"
    )

    # Optional arguments
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging (DEBUG level)"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress console output except errors"
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=3,
        metavar="N",
        help="Number of concurrent processing workers (default: 3, max: 10)"
    )

    parser.add_argument(
        "--single-file",
        metavar="FILENAME",
        help="Process only a specific file from the input folder"
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Report labels that open but never close (e.g. '##Positive' without '##')"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print extracted feedback as JSON instead of writing the workbook"
    )

    parser.add_argument(
        "--report-file",
        metavar="PATH",
        help="Save detailed processing report to JSON file"
    )

    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Save logs to specified file (default: logs/ocr_feedback_parser.log)"
    )

    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Only validate configuration and files, don't process"
    )

    parser.add_argument(
        "--skip-api-check",
        action="store_true",
        help="Skip OCR connection validation (useful for testing)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"OCR Feedback Parser {__version__}"
    )

    return parser


def validate_arguments(args: argparse.Namespace) -> None:
    """
    Validate command-line arguments and provide helpful error messages.

    Args:
        args: Parsed command-line arguments

    Raises:
        SystemExit: If validation fails
    """
    input_path = Path(args.input_folder)
    if not input_path.exists():
        print(f"Error: Input folder '{args.input_folder}' does not exist")
        print("Please provide a valid path to a folder containing feedback inputs")
        sys.exit(1)

    if not input_path.is_dir():
        print(f"Error: '{args.input_folder}' is not a directory")
        print("Please provide a path to a folder, not a file")
        sys.exit(1)

    if args.module not in get_module_ids():
        print(f"Error: Unknown module '{args.module}'")
        print(f"Known modules: {', '.join(get_module_ids())}")
        sys.exit(1)

    if not args.dry_run:
        output_dir = Path(args.output_file).parent
        if not output_dir.exists():
            try:
                output_dir.mkdir(parents=True, exist_ok=True)
                print(f"Created output directory: {output_dir}")
            except OSError as e:
                print(f"Error: Cannot create output directory '{output_dir}': {e}")
                sys.exit(1)

        if not args.output_file.lower().endswith('.xlsx'):
            print("Warning: Output file should have .xlsx extension for best compatibility")

    if args.workers < 1 or args.workers > 10:
        print("Error: Worker count must be between 1 and 10")
        sys.exit(1)

    if args.single_file:
        single_file_path = input_path / args.single_file
        if not single_file_path.exists():
            print(f"Error: Specified file '{args.single_file}' not found in input folder")
            sys.exit(1)

        if not single_file_path.is_file():
            print(f"Error: '{args.single_file}' is not a file")
            sys.exit(1)

    if args.verbose and args.quiet:
        print("Error: Cannot use both --verbose and --quiet options")
        sys.exit(1)


def print_usage_examples():
    """Print helpful usage examples."""
    print("\nUsage Examples:")
    print("  Basic processing:")
    print("    python main.py ./sheets ./output/feedback.xlsx --candidate C-042 --module ethics --session lecture")
    print()
    print("  Preview extraction as JSON:")
    print("    python main.py ./sheets ./output/feedback.xlsx --candidate C-042 --module ethics "
          "--session lecture --dry-run")
    print()
    print("  Process single file:")
    print("    python main.py ./sheets ./output/feedback.xlsx --candidate C-042 --module ethics "
          "--session lecture --single-file sheet1.png")
    print()
    print("Environment Setup (image and PDF inputs only):")
    print("  GOOGLE_VISION_API_KEY=your_api_key_here")
    print("  LOG_LEVEL=DEBUG (for detailed logging)")
    print()


def inputs_need_ocr(args: argparse.Namespace, config_manager: ConfigManager) -> bool:
    """Whether any selected input is an image or PDF."""
    scanner = FileScanner(config_manager.get_supported_formats())
    input_path = Path(args.input_folder)

    if args.single_file:
        return scanner.needs_ocr(input_path / args.single_file)

    return any(
        scanner.needs_ocr(f) for f in input_path.iterdir()
        if f.is_file() and f.suffix.lower() in scanner.get_supported_extensions()
    )


def validate_environment_setup(config_manager: ConfigManager,
                               needs_ocr: bool,
                               verbose: bool = False) -> bool:
    """
    Validation of environment setup and configuration.

    Args:
        config_manager: Configuration manager instance
        needs_ocr: Whether Google Vision credentials are required
        verbose: Whether to print detailed validation information

    Returns:
        bool: True if all validations pass, False otherwise
    """
    validation_passed = True

    if verbose:
        print("\n" + "=" * 50)
        print("ENVIRONMENT VALIDATION")
        print("=" * 50)

    # 1. Validate OCR credentials
    if verbose:
        print("Checking Google Vision credentials...")

    if not config_manager.has_vision_credentials():
        if needs_ocr:
            print("✗ Google Vision credentials missing")
            print("  Issue: Image or PDF inputs need OCR")
            print("  Solution: Set GOOGLE_VISION_API_KEY or GOOGLE_VISION_ACCESS_TOKEN")
            validation_passed = False
        elif verbose:
            print("ℹ No Google Vision credentials (only text inputs can be processed)")
    elif not config_manager.validate_api_key():
        print("✗ Google Vision credential validation failed")
        print("  Issue: Credential appears to be invalid or placeholder")
        validation_passed = False
    elif verbose:
        print(f"✓ Google Vision auth: {config_manager.get_auth_method()}")

    # 2. Validate API URL
    api_url = config_manager.get_api_url()
    if not api_url.startswith(('http://', 'https://')):
        print(f"✗ Invalid API URL format: {api_url}")
        print("  Solution: Ensure GOOGLE_VISION_API_URL starts with http:// or https://")
        validation_passed = False
    elif verbose:
        print(f"✓ API URL: {api_url}")

    # 3. Validate numeric configurations
    if verbose:
        print("Checking numeric configuration values...")

    max_retries = config_manager.get_max_retries()
    retry_delay = config_manager.get_retry_delay()
    request_timeout = config_manager.get_request_timeout()
    max_file_size = config_manager.get_max_file_size_mb()

    if max_retries < 0 or max_retries > 10:
        print(f"✗ Invalid MAX_RETRIES value: {max_retries} (should be 0-10)")
        validation_passed = False

    if retry_delay < 0 or retry_delay > 60:
        print(f"✗ Invalid RETRY_DELAY value: {retry_delay} (should be 0-60 seconds)")
        validation_passed = False

    if request_timeout < 5 or request_timeout > 300:
        print(f"✗ Invalid REQUEST_TIMEOUT value: {request_timeout} (should be 5-300 seconds)")
        validation_passed = False

    if max_file_size < 1 or max_file_size > 500:
        print(f"✗ Invalid MAX_FILE_SIZE_MB value: {max_file_size} (should be 1-500 MB)")
        validation_passed = False

    if verbose and validation_passed:
        settings = config_manager.get_parser_settings()
        print(f"✓ Max retries: {max_retries}")
        print(f"✓ Retry delay: {retry_delay}s")
        print(f"✓ Request timeout: {request_timeout}s")
        print(f"✓ Max file size: {max_file_size}MB")
        print(f"✓ Min body length: {settings.min_body_length}")
        print(f"✓ Dedup prefix length: {settings.dedup_prefix_length}")

    # 4. Validate supported formats
    if verbose:
        print("Checking supported file formats...")

    supported_formats = config_manager.get_supported_formats()
    known_formats = {ext.lstrip('.') for ext in FileScanner.TEXT_EXTENSIONS | FileScanner.OCR_EXTENSIONS}

    if not supported_formats:
        print("✗ No supported formats configured")
        validation_passed = False
    else:
        unknown_formats = set(supported_formats) - known_formats
        if unknown_formats:
            print(f"⚠ Ignoring unknown formats: {', '.join(sorted(unknown_formats))}")

        if verbose:
            print(f"✓ Supported formats: {', '.join(supported_formats)}")

    # 5. Validate log level
    log_level = config_manager.get_log_level()
    valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}

    if log_level not in valid_levels:
        print(f"✗ Invalid LOG_LEVEL: {log_level} (should be one of: {', '.join(sorted(valid_levels))})")
        validation_passed = False
    elif verbose:
        print(f"✓ Log level: {log_level}")

    # 6. Check .env file if it exists
    env_file = Path('.env')
    if env_file.exists():
        if verbose:
            print(f"✓ Found .env file: {env_file.absolute()}")
    elif verbose:
        print("ℹ No .env file found (using system environment variables)")

    if verbose:
        print("=" * 50)
        if validation_passed:
            print("✓ ALL VALIDATIONS PASSED")
        else:
            print("✗ VALIDATION FAILED - Please fix the issues above")
        print("=" * 50 + "\n")

    return validation_passed


def print_environment_help():
    """Print helpful information about environment setup."""
    print("\nEnvironment Setup Guide:")
    print("=" * 40)
    print()
    print("Required for image and PDF inputs (one of):")
    print("  GOOGLE_VISION_API_KEY=your_actual_api_key_here")
    print("  GOOGLE_VISION_ACCESS_TOKEN=your_oauth_access_token")
    print()
    print("Optional Environment Variables:")
    print("  GOOGLE_VISION_API_URL=https://vision.googleapis.com/v1/images:annotate")
    print("  MAX_RETRIES=3")
    print("  RETRY_DELAY=1")
    print("  REQUEST_TIMEOUT=30")
    print("  MAX_FILE_SIZE_MB=10")
    print("  SUPPORTED_FORMATS=txt,png,jpg,jpeg,webp,pdf")
    print("  MIN_BODY_LENGTH=4")
    print("  DEDUP_PREFIX_LENGTH=20")
    print("  STRICT_MODE=false")
    print("  DEFAULT_AUTHOR=Anonymous")
    print("  LOG_LEVEL=INFO")
    print()
    print("Setup Methods:")
    print("  1. Create a .env file in the project root:")
    print("     echo 'GOOGLE_VISION_API_KEY=your_key_here' > .env")
    print()
    print("  2. Set environment variables directly:")
    print("     export GOOGLE_VISION_API_KEY=your_key_here")
    print()


def print_dry_run_results(results: List[ProcessingResult]) -> None:
    """Print extracted records per input as JSON."""
    output = []
    for result in sorted(results, key=lambda r: r.file_name):
        output.append({
            'file_name': result.file_name,
            'status': result.status,
            'records': [record.to_dict() for record in result.records],
            'warnings': [warning.message for warning in result.warnings],
            'error_message': result.error_message
        })
    print(json.dumps(output, indent=2, ensure_ascii=False))


def cleanup_resources(batch_processor=None, logging_config=None):
    """
    Clean up resources and perform final cleanup procedures.

    Args:
        batch_processor: BatchProcessor instance to clean up
        logging_config: LoggingConfig instance to clean up
    """
    if batch_processor:
        batch_processor.clear_error_history()

    if logging_config:
        logging_config.close()


def handle_processing_interruption(batch_processor=None, output_file=None):
    """
    Handle graceful interruption of processing workflow.

    Args:
        batch_processor: BatchProcessor instance
        output_file: Path to output file being written
    """
    print("\n⚠ Processing interrupted by user")

    if batch_processor and output_file:
        stats = batch_processor.get_processing_statistics()
        if stats['successful'] > 0:
            print(f"✓ {stats['successful']} files were successfully processed before the interruption")
            print(f"The workbook is only saved at the end of a run; {output_file} was not updated")

    print("Processing stopped gracefully")


def main():
    """Main application entry point."""
    batch_processor = None
    logging_config = None

    parser = create_argument_parser()

    if len(sys.argv) == 1:
        parser.print_help()
        print_usage_examples()
        sys.exit(0)

    args = parser.parse_args()

    validate_arguments(args)

    if args.verbose:
        log_level = "DEBUG"
    elif args.quiet or args.dry_run:
        # Keep stdout clean for the JSON output
        log_level = "ERROR"
    else:
        log_level = None

    show_progress = not (args.quiet or args.dry_run)

    try:
        if show_progress:
            print("Initializing OCR Feedback Parser...")

        config_manager = ConfigManager()
        log_level = log_level or config_manager.get_log_level()

        if show_progress:
            print("✓ Configuration loaded successfully")
            print("Validating environment setup...")

        needs_ocr = inputs_need_ocr(args, config_manager)
        if not validate_environment_setup(config_manager, needs_ocr, verbose=args.verbose):
            print("\n✗ Environment validation failed!")
            print_environment_help()
            sys.exit(1)

        if show_progress:
            print("✓ Environment validation passed")

        context = SessionContext(
            candidate_id=args.candidate,
            module_id=args.module,
            session_type=args.session,
            author=args.author or config_manager.get_default_author()
        )

        from ocr_feedback_parser.utils.logging_config import setup_logging
        logging_config, _ = setup_logging(
            log_level=log_level,
            log_file=args.log_file,
            enable_console=not (args.quiet or args.dry_run) or args.verbose
        )

        from ocr_feedback_parser.services.batch_processor import BatchProcessor
        batch_processor = BatchProcessor(config_manager, context, strict=args.strict)

        if args.validate_only:
            if needs_ocr and not batch_processor.validate_configuration(skip_api_check=args.skip_api_check):
                print("✗ OCR configuration validation failed")
                cleanup_resources(batch_processor, logging_config)
                sys.exit(1)
            print("\n✓ All validations completed successfully")
            print("Configuration is ready for processing")
            cleanup_resources(batch_processor, logging_config)
            return

        if show_progress:
            print("\nProcessing Configuration:")
            print(f"  Input folder: {args.input_folder}")
            print(f"  Output file: {args.output_file}")
            print(f"  Candidate: {context.candidate_id}")
            print(f"  Module: {context.module_id} ({context.session_type})")
            print(f"  Author: {context.author}")
            print(f"  Workers: {args.workers}")
            if args.single_file:
                print(f"  Single file mode: {args.single_file}")
            if args.report_file:
                print(f"  Report file: {args.report_file}")
            print("\nStarting processing workflow...")
            print("=" * 60)

        try:
            if args.single_file:
                single_file_path = Path(args.input_folder) / args.single_file
                result = batch_processor.process_single_file_standalone(
                    str(single_file_path),
                    args.output_file,
                    dry_run=args.dry_run
                )

                if show_progress:
                    print("\nSingle file processing result:")
                    print(f"  File: {result.file_name}")
                    print(f"  Status: {result.status}")
                    print(f"  Feedback records: {len(result.records)}")
                    if result.error_message:
                        print(f"  Error: {result.error_message}")
            else:
                batch_processor.process_directory(
                    input_directory=args.input_folder,
                    output_excel_file=args.output_file,
                    max_workers=args.workers,
                    dry_run=args.dry_run
                )

                if show_progress:
                    batch_processor.print_processing_statistics()

            results = batch_processor.get_processing_results()

            if args.report_file:
                batch_processor.save_processing_report(args.report_file)
                if show_progress:
                    print(f"✓ Detailed report saved to: {args.report_file}")

            if args.dry_run:
                print_dry_run_results(results)
            elif show_progress:
                print("=" * 60)
                print("✓ Processing completed successfully!")
                print(f"✓ Results saved to: {args.output_file}")

            if not any(result.has_data() for result in results) and not args.quiet:
                print("⚠ No feedback was extracted - please re-check the OCR text", file=sys.stderr)

        except KeyboardInterrupt:
            handle_processing_interruption(batch_processor, args.output_file)
            cleanup_resources(batch_processor, logging_config)
            sys.exit(130)

        except Exception as processing_error:
            print(f"\n✗ Processing failed: {processing_error}")

            error_summary = batch_processor.get_error_summary()
            if error_summary['total_errors'] > 0:
                print("\nError Summary:")
                print(f"  Total errors: {error_summary['total_errors']}")
                if error_summary['most_common_error']:
                    print(f"  Most common: {error_summary['most_common_error']}")

            if args.verbose:
                import traceback
                traceback.print_exc()

            cleanup_resources(batch_processor, logging_config)
            sys.exit(1)

        cleanup_resources(batch_processor, logging_config)

    except ConfigurationError as e:
        print(f"\n✗ Configuration Error: {e}")
        print_environment_help()
        cleanup_resources(batch_processor, logging_config)
        sys.exit(1)
    except ValueError as e:
        print(f"\n✗ Invalid input: {e}")
        cleanup_resources(batch_processor, logging_config)
        sys.exit(1)
    except KeyboardInterrupt:
        handle_processing_interruption(batch_processor, getattr(args, 'output_file', None))
        cleanup_resources(batch_processor, logging_config)
        sys.exit(130)


if __name__ == "__main__":
    main()
