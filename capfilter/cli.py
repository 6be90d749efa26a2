#!/usr/bin/env python3
"""
capfilter CLI - Command Line Interface

Compiles capture attributes given on the command line into a pcap-filter
expression suitable for tcpdump or any libpcap based capture tool.

Usage:
    capfilter -a 0:ipaddress:any_of:"10.0.5.50 10.0.5.51" -a 1:section_match:none
    capfilter --preset tagged
    capfilter -i lo0 -a 0:port:or_any_of:"80 443"
"""

import argparse
import json
import sys

import structlog

from capfilter.filters import (
    SECTION_PRESET,
    Attribute,
    AttributeType,
    FilterError,
    compile_expression,
    interface_supports_vlan,
)
from capfilter.logs import configure_logging
from capfilter.output.console import get_console

logger = structlog.get_logger(__name__)

EXIT_FILTER_ERROR = 2


# =============================================================================
# Argument Parsing
# =============================================================================


def parse_attribute(text: str) -> Attribute:
    """
    Build an attribute from "SECTION:TYPE:MATCH[:INPUT]".

    The input is everything after the third colon, so MAC and IPv6
    addresses need no escaping.

    Raises:
        FilterError: If the attribute or its input is invalid
        ValueError: If the text does not have at least three fields
    """
    parts = text.split(":", 3)
    if len(parts) < 3:
        raise ValueError(f"Expected SECTION:TYPE:MATCH[:INPUT], got '{text}'")

    section, attr_type, match = parts[:3]
    attribute = Attribute(attr_type, section, match)
    attribute.set_input(parts[3] if len(parts) == 4 else "")
    return attribute


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="capfilter",
        description="capfilter - Compile capture criteria into a pcap-filter expression",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Attribute types: vlan, ethertype, protocol, ipaddress, macaddress, port,
                 section_match
Type matches:    all_of, any_of, none_of, or_all_of, or_any_of, or_none_of
Section matches: none, all_of, any_of

Examples:
    capfilter -a "0:ipaddress:any_of:10.0.5.50 10.0.5.51" -a 1:section_match:none
    capfilter -a 1:vlan:any_of:100 -a "1:port:any_of:80 443"
    capfilter --preset untagged -i em0
""",
    )

    parser.add_argument(
        "-a", "--attribute",
        action="append",
        default=[],
        metavar="SECTION:TYPE:MATCH[:INPUT]",
        help="Capture attribute (repeatable, order matters)",
    )

    parser.add_argument(
        "-p", "--preset",
        choices=["any", "untagged", "tagged"],
        help="Use a preset instead of the attributes",
    )

    parser.add_argument(
        "-i", "--interface",
        help="Capture interface (pseudo interfaces disable VLAN sections)",
    )

    parser.add_argument(
        "--no-vlan",
        action="store_true",
        help="Treat the interface as unable to carry VLAN tags",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON only",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    return parser


# =============================================================================
# Main Entry Point
# =============================================================================


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    args = build_parser().parse_args(argv)

    configure_logging(level="DEBUG" if args.verbose else "WARNING", log_format="console")
    console = get_console()

    vlan_supported = not args.no_vlan and interface_supports_vlan(args.interface)

    try:
        attributes = [parse_attribute(item) for item in args.attribute]
        if args.preset:
            attributes.insert(
                0, Attribute(AttributeType.ATTRIBUTE_PRESET, SECTION_PRESET, args.preset)
            )
        expression = compile_expression(attributes, vlan_supported=vlan_supported)
    except (FilterError, ValueError) as e:
        logger.debug("cli_compile_failed", error=str(e))
        if args.json:
            detail = e.to_dict() if isinstance(e, FilterError) else {"message": str(e)}
            print(json.dumps({"error": detail}))
        else:
            console.print_error(str(e))
        return EXIT_FILTER_ERROR

    if args.json:
        print(json.dumps({"expression": expression, "vlan_supported": vlan_supported}))
        return 0

    console.print_header()
    console.print_attributes(attributes)
    console.print_expression(expression, vlan_supported)
    return 0


if __name__ == "__main__":
    sys.exit(main())
