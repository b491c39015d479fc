#!/usr/bin/env python3
"""Command-line interface for the Neutopia randomizer."""

import argparse
import sys
import traceback
from pathlib import Path
import logging

# Ensure project root is on the import path when executing from the CLI folder
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from logic.checks import dump_checks, generate_checks
from logic.neutopia import Neutopia, area_name
from logic.randomizer import Config, RandoType, randomize
from rom.errors import NeutopiaError
from rom.neutopia_rom import NeutopiaRom
from rom.verify import strip_header, verify
from version import __version_display__


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Neutopia randomizer and ROM tools.")
    parser.add_argument(
        '--version', action='version', version=f"%(prog)s {__version_display__}")
    parser.add_argument( '-log',
        '--loglevel',
        default='warning',
        help='Provide logging level. Example --loglevel debug, default=warning' )
    subparsers = parser.add_subparsers(dest="command", required=True)

    rando = subparsers.add_parser(
        "randomize", help="Randomize a ROM and write the result.")
    rando.add_argument(
        "--rom",
        default="Neutopia (USA).pce",
        help="Path to the NA Neutopia ROM (.pce), headered or not.")
    rando.add_argument(
        "--out",
        help="Output file. Defaults to neutopia-randomizer-<seed>.pce in the "
             "current directory.")
    rando.add_argument(
        "--seed",
        help="Base-36 seed name. A random seed is used if omitted.")
    rando.add_argument(
        "--type",
        default=RandoType.GLOBAL.value,
        choices=[t.value for t in RandoType],
        help="Randomization mode (default: global).")
    rando.add_argument(
        "--checks",
        help="Check catalog JSON for global mode. Without it every chest is "
             "an ungated check.")
    rando.add_argument(
        "--patch-dir",
        help="Directory holding the built .ips patches (default: ips/).")

    info = subparsers.add_parser("info", help="Identify a ROM.")
    info.add_argument("--rom", default="Neutopia (USA).pce", help="ROM to identify.")
    info.add_argument(
        "--intervals", action="store_true",
        help="Also list the room data ranges of each area and the gaps between them.")

    checks = subparsers.add_parser(
        "checks", help="Write an ungated check catalog for a ROM's chests.")
    checks.add_argument("--rom", default="Neutopia (USA).pce", help="ROM to scan.")
    checks.add_argument("--out", default="checks.json", help="Output JSON file.")

    return parser


def read_rom(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError as exc:
        raise FileNotFoundError(f"Input ROM not found: {path}") from exc


def run_randomizer(args) -> Path:
    config = Config(
        ty=RandoType.parse(args.type),
        seed=args.seed,
        checks_path=args.checks,
        patch_dir=args.patch_dir,
    )
    game = randomize(config, read_rom(Path(args.rom)))

    output_path = Path(args.out) if args.out else Path(game.filename)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(game.data)
    return output_path


def run_info(args) -> None:
    data = read_rom(Path(args.rom))
    info = verify(data)

    print(f"Info for {args.rom}:")
    print(f"  Headered:    {info.headered}")
    print(f"  MD5 hash:    {info.md5_hash}")
    print(f"  Description: {info.desc}")
    print(f"  Region:      {info.region.value}")

    if args.intervals:
        rom = NeutopiaRom(strip_header(data))
        for area in range(rom.num_areas):
            store = rom.room_data_intervals(area)
            print(f"  Area {area:02x} ({area_name(area)}):")
            for interval in store.get_intervals():
                print(f"    data 0x{interval.start:05x}-0x{interval.end:05x}")
            for gap in store.gaps():
                print(f"    gap  0x{gap.start:05x}-0x{gap.end:05x} ({len(gap)} bytes)")


def run_checks(args) -> Path:
    game = Neutopia(strip_header(read_rom(Path(args.rom))))
    checks = generate_checks(game)
    output_path = Path(args.out)
    output_path.write_text(dump_checks(checks) + "\n")
    print(f"Wrote {len(checks)} checks")
    return output_path


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.loglevel.upper())

    try:
        if args.command == "randomize":
            output_path = run_randomizer(args)
            print(f"wrote {output_path}")
        elif args.command == "info":
            run_info(args)
        elif args.command == "checks":
            output_path = run_checks(args)
            print(f"wrote {output_path}")
    except (NeutopiaError, ValueError, FileNotFoundError) as exc:
        parser.error(str(exc))
    except Exception as exc:  # pragma: no cover
        print(f"Error: {exc}", file=sys.stderr)
        traceback.print_exc()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
