from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from udevrules.common.models import MODE_ALIASES, GeneratorOptions, UdevMode
from udevrules.config import Settings
from udevrules.generator import count_rule_lines, generate_udev_file
from udevrules.parser import UdevRuleGenerator

MODE_CHOICES = sorted([m.value for m in UdevMode] + list(MODE_ALIASES))


def parse_hex_id(text: str, *, what: str) -> int:
    s = text.strip().lower()
    if s.startswith("0x"):
        s = s[2:]
    try:
        v = int(s, 16)
    except ValueError:
        raise SystemExit(f"invalid {what}: {text!r} (expected hex, e.g. 0fd9)") from None
    if not 0 <= v <= 0xFFFF:
        raise SystemExit(f"invalid {what}: {text!r} (out of range 0000-ffff)")
    return v


def parse_device_arg(text: str) -> tuple[int, int]:
    if ":" not in text:
        raise SystemExit(f"invalid --device: {text!r} (expected VID:PID)")
    vid, pid = text.split(":", 1)
    return parse_hex_id(vid, what="vendor id"), parse_hex_id(pid, what="product id")


def log_level(name: str) -> int:
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.WARNING


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Merge udev rule files into one canonical hidraw rules file (one entry per vendor/product)."
    )
    ap.add_argument("inputs", nargs="*", help="Existing udev rules files to merge.")
    ap.add_argument(
        "--device",
        action="append",
        default=[],
        metavar="VID:PID",
        help="Allow a single device, hex ids (repeatable), e.g. 0fd9:0060.",
    )
    ap.add_argument(
        "--vendor",
        action="append",
        default=[],
        metavar="VID",
        help="Allow every product of a vendor, hex id (repeatable).",
    )
    ap.add_argument("--mode", choices=MODE_CHOICES, default=None, help="Access mode (default: UDEV_MODE or restricted-group).")
    ap.add_argument("--group", default=None, help="Owning group in restricted-group mode (default: UDEV_GROUP or plugdev).")
    ap.add_argument("--out", default=None, help="Output path, '-' for stdout (default: UDEV_RULES_OUT).")
    ap.add_argument("--sort-vendors", action="store_true", help="Write vendors in ascending id order.")
    ap.add_argument("--json", action="store_true", help="Write the merged records as JSON instead of udev rules.")
    ap.add_argument("--env-file", default=".env", help="Optional .env file with UDEV_* settings.")
    ap.add_argument("--log", default="", help="Also write logs to this file.")
    ap.add_argument("--verbose", action="store_true", help="Log per-file progress.")
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.load(args.env_file)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if args.log:
        Path(args.log).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(args.log, encoding="utf-8"))
    level = logging.INFO if args.verbose else log_level(settings.log_level)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(message)s",
        handlers=handlers,
    )
    log = logging.getLogger("udev_merge_rules")

    gen = UdevRuleGenerator()
    for name in args.inputs:
        p = Path(name)
        if not p.is_file():
            raise SystemExit(f"input not found: {p}")
        gen.add_file_contents(p.read_text(encoding="utf-8", errors="replace"))
        log.info("READ %s vendors=%d", p, len(gen))

    for dev in args.device:
        vid, pid = parse_device_arg(dev)
        gen.add_device(vid, pid)
    for vendor in args.vendor:
        gen.add_vendor_wildcard(parse_hex_id(vendor, what="vendor id"))

    rules = gen.rules
    if args.sort_vendors or settings.sort_vendors:
        rules.sort(key=lambda r: r.vendor_id)

    options = settings.generator_options()
    if args.mode is not None or args.group is not None:
        options = GeneratorOptions(
            mode=args.mode if args.mode is not None else options.mode,
            group_name=args.group if args.group is not None else options.group_name,
        )

    if args.json:
        text = json.dumps([r.model_dump() for r in rules], indent=2) + "\n"
    else:
        text = generate_udev_file(rules, options)

    out = args.out if args.out is not None else str(settings.rules_out)
    if out == "-":
        sys.stdout.write(text)
        return 0

    out_path = Path(out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(text, encoding="utf-8")
    log.info("WROTE %s mode=%s", out_path, options.mode.value)
    print(f"Vendors: {len(rules)}")
    if not args.json:
        print(f"Device lines: {count_rule_lines(rules)}")
    print(f"Output: {out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
