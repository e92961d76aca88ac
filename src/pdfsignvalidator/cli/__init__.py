"""
Command-line interface for pdfsignvalidator.

Argument parsing and dispatch.  Every subcommand exits with status 0 on
success and 1 when a check fails or an input cannot be processed.
"""

from __future__ import annotations

import argparse
import datetime
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from .. import api
from ..constants import ENV_MAX_CMS_SIZE, ENV_SIGNER_POLICY, SIGNER_POLICIES, __version__
from ..errors import ValidatorError

PDF_MAGIC = b"%PDF-"


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, datetime.datetime):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.hex()
    return value


def _parse_selector(pairs: Sequence[str] | None) -> dict[str, str] | None:
    if not pairs:
        return None
    selector: dict[str, str] = {}
    for pair in pairs:
        path, sep, value = pair.partition("=")
        if not sep or not path:
            raise ValidatorError(f"Invalid --match {pair!r}, expected PATH=VALUE")
        selector[path.strip()] = value
    return selector


def _cmd_count(args: argparse.Namespace) -> int:
    print(api.sign_count(args.pdf))
    return 0


def _cmd_info(args: argparse.Namespace) -> int:
    path = Path(args.file)
    head = api.read_file(path)[: len(PDF_MAGIC)]
    if head == PDF_MAGIC:
        records = api.info_from_pdf(path, strict=not args.lenient, policy=args.policy)
        payload: Any = [_jsonable(r.to_dict()) for r in records]
    else:
        payload = _jsonable(api.info_from_pem(path).to_dict())
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


def _report(ok: bool, what: str) -> int:
    print(f"{what}: {'VALID' if ok else 'INVALID'}")
    return 0 if ok else 1


def _cmd_check(args: argparse.Namespace) -> int:
    ok = api.sign_is_valid(args.pdf, args.pem, _parse_selector(args.match))
    return _report(ok, "Signature issuer")


def _cmd_match(args: argparse.Namespace) -> int:
    ok = api.sign_match_subject(args.pdf, args.pem, _parse_selector(args.match))
    return _report(ok, "Signer certificate")


def _cmd_cert(args: argparse.Namespace) -> int:
    ok = api.cert_is_valid(args.subject, args.issuer)
    return _report(ok, "Certificate issuer")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdfsignvalidator",
        description="Validate the certificates behind PDF signatures.",
        epilog=(
            "Environment variables:\n"
            f"  {ENV_SIGNER_POLICY}  Signer certificate policy "
            f"({', '.join(SIGNER_POLICIES)}; default: last)\n"
            f"  {ENV_MAX_CMS_SIZE}   Largest CMS blob in bytes (default: 16 MB)\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"pdfsignvalidator {__version__}"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug details")

    sub = parser.add_subparsers(dest="command", help="Available commands")

    p_count = sub.add_parser("count", help="Count signatures in a PDF")
    p_count.add_argument("pdf", help="PDF file")

    p_info = sub.add_parser("info", help="Show certificate details of a PDF or PEM file")
    p_info.add_argument("file", help="Signed PDF or PEM certificate")
    p_info.add_argument(
        "--policy", choices=SIGNER_POLICIES, default=None, help="Signer certificate policy"
    )
    p_info.add_argument(
        "--lenient", action="store_true", help="Skip broken signatures instead of failing"
    )

    match_help = "Select a signature by field, e.g. subject.common_name=Alice (repeatable)"

    p_check = sub.add_parser("check", help="Check the signer certificate against an issuer")
    p_check.add_argument("pdf", help="Signed PDF file")
    p_check.add_argument("pem", help="Issuer certificate (PEM)")
    p_check.add_argument("-m", "--match", action="append", metavar="PATH=VALUE", help=match_help)

    p_match = sub.add_parser("match", help="Check the signer certificate is a given certificate")
    p_match.add_argument("pdf", help="Signed PDF file")
    p_match.add_argument("pem", help="Subject certificate (PEM)")
    p_match.add_argument("-m", "--match", action="append", metavar="PATH=VALUE", help=match_help)

    p_cert = sub.add_parser("cert", help="Check a certificate against an issuer")
    p_cert.add_argument("subject", help="Subject certificate (PEM)")
    p_cert.add_argument("issuer", help="Issuer certificate (PEM)")

    return parser


_COMMANDS = {
    "count": _cmd_count,
    "info": _cmd_info,
    "check": _cmd_check,
    "match": _cmd_match,
    "cert": _cmd_cert,
}


def main(argv: Sequence[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    handler = _COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(1)

    try:
        status = handler(args)
    except ValidatorError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(status)


if __name__ == "__main__":
    main()
