"""Anonymize a telemetry dump from the command line.

Reads JSON (or plain text, when the input is not valid JSON) from a file
or standard input and writes ``{"data": ..., "metadata": ...}`` as JSON:

>>> telemetry-anonymizer diagnostics.json -o shared.json --kind diagnostic
>>> journalctl -u pve-cluster | telemetry-anonymizer --detect
"""

import argparse
import json
import sys
from dataclasses import asdict, replace
from typing import Any

from telemetry_anonymizer.anonymization.factory import get_default_engine
from telemetry_anonymizer.config.settings import Settings
from telemetry_anonymizer.logging.logger import Log
from telemetry_anonymizer.processor.models import InputKind, TelemetryPayload
from telemetry_anonymizer.processor.processor import anonymize_payload


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Anonymize infrastructure telemetry before sharing it."
    )
    parser.add_argument(
        "input",
        nargs="?",
        type=argparse.FileType("r", encoding="utf-8"),
        default=sys.stdin,
        help="Input file (defaults to STDIN).",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=argparse.FileType("w", encoding="utf-8"),
        default=sys.stdout,
        help="Output file (defaults to STDOUT).",
    )
    parser.add_argument(
        "--kind",
        choices=[str(kind) for kind in InputKind],
        help="Process the input as this kind of telemetry.",
    )
    parser.add_argument(
        "--detect",
        action="store_true",
        help="Only report detected PII; do not anonymize.",
    )
    parser.add_argument(
        "--no-pseudonyms",
        action="store_true",
        help="Redact matches instead of replacing them with pseudonyms.",
    )
    parser.add_argument("--salt", help="Salt for hash-based replacement rules.")
    return parser


def _load(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def main(argv: list[str] | None = None) -> None:
    """Entry point: settings -> logging -> engine -> anonymize -> write."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)
    engine = get_default_engine(settings)

    data = _load(args.input.read())

    if args.detect:
        report: dict[str, Any] = asdict(engine.detect_pii(data))
    else:
        options = engine.default_options
        if args.no_pseudonyms:
            options = replace(options, enable_pseudonyms=False)
        if args.salt is not None:
            options = replace(options, hash_salt=args.salt)

        if args.kind:
            result = anonymize_payload(
                TelemetryPayload(kind=InputKind(args.kind), data=data),
                engine=engine,
                options=options,
            )
        else:
            result = engine.anonymize(data, options)
        report = result.to_dict()

    json.dump(report, args.output, indent=2, ensure_ascii=False, default=str)
    args.output.write("\n")
    args.output.flush()


if __name__ == "__main__":
    main()
