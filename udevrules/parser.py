from __future__ import annotations

import logging
import re
from functools import reduce
from typing import Iterator, NamedTuple

from udevrules.common.models import MAX_USB_ID, DeviceRule

log = logging.getLogger(__name__)

VENDOR_RE = re.compile(r'ATTRS\{idVendor\}=="([0-9a-f]{4})"', re.IGNORECASE)
PRODUCT_RE = re.compile(r'ATTRS\{idProduct\}=="([0-9a-f]{4})"', re.IGNORECASE)


class LineMatch(NamedTuple):
    vendor_id: int
    product_id: int | None


def _check_id(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an int: {value!r}")
    if not 0 <= value <= MAX_USB_ID:
        raise ValueError(f"{name} out of range (expected 0000-ffff): {value!r}")
    return value


def match_line(line: str) -> LineMatch | None:
    """
    Pull the vendor/product signal out of one rule line.

    Returns None for blank lines, comments and lines without an idVendor match.
    """
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None
    vm = VENDOR_RE.search(line)
    if not vm:
        return None
    pm = PRODUCT_RE.search(line)
    return LineMatch(
        vendor_id=int(vm.group(1), 16),
        product_id=int(pm.group(1), 16) if pm else None,
    )


def iter_line_matches(text: str) -> Iterator[LineMatch]:
    # Only "\n" ends a line; form feeds or NEL inside a line stay part of it.
    for lineno, raw in enumerate(text.split("\n"), start=1):
        raw = raw.rstrip("\r")
        m = match_line(raw)
        if m is None:
            if raw.strip() and not raw.lstrip().startswith("#"):
                log.debug("skip line %d: no idVendor match", lineno)
            continue
        yield m


def merge_line(rules: dict[int, DeviceRule], m: LineMatch) -> dict[int, DeviceRule]:
    """
    Fold one line signal into the vendor mapping (mutates and returns it).

    - unseen vendor: single product, or wildcard when the line has no product
    - wildcard vendor: unchanged
    - no product on the line: the vendor becomes wildcard
    - otherwise the product is appended once
    """
    existing = rules.get(m.vendor_id)
    if existing is None:
        rules[m.vendor_id] = DeviceRule(
            vendor_id=m.vendor_id,
            product_ids=None if m.product_id is None else [m.product_id],
        )
    elif existing.product_ids is None:
        pass
    elif m.product_id is None:
        existing.product_ids = None
    elif m.product_id not in existing.product_ids:
        existing.product_ids.append(m.product_id)
    return rules


def parse_udev_file(content: str) -> dict[int, DeviceRule]:
    """
    Parse udev rules text into one merged DeviceRule per vendor id.

    Lines that don't carry an ATTRS{idVendor} match are ignored, so unrelated
    directives (SUBSYSTEM=="input", ...) may be mixed in freely.
    """
    rules: dict[int, DeviceRule] = reduce(merge_line, iter_line_matches(content), {})
    log.debug("parsed %d vendor(s)", len(rules))
    return rules


class UdevRuleGenerator:
    """
    Incrementally collects device rules from rule files and direct calls.

    Not safe for concurrent use without external locking.
    """

    def __init__(self) -> None:
        self._devices: dict[int, DeviceRule] = {}

    def add_device(self, vendor_id: int, product_id: int) -> None:
        m = LineMatch(_check_id("vendor id", vendor_id), _check_id("product id", product_id))
        merge_line(self._devices, m)

    def add_vendor_wildcard(self, vendor_id: int) -> None:
        vid = _check_id("vendor id", vendor_id)
        # Explicit override: drops any product list collected so far.
        self._devices[vid] = DeviceRule(vendor_id=vid, product_ids=None)

    def add_file_contents(self, content: str) -> None:
        before = len(self._devices)
        reduce(merge_line, iter_line_matches(content), self._devices)
        log.debug("ingested rules text: %d new vendor(s)", len(self._devices) - before)

    @property
    def rules(self) -> list[DeviceRule]:
        return [r.model_copy(deep=True) for r in self._devices.values()]

    def __len__(self) -> int:
        return len(self._devices)

    def __contains__(self, vendor_id: object) -> bool:
        return vendor_id in self._devices
