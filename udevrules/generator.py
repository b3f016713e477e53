from __future__ import annotations

import logging
from typing import Iterable

from udevrules.common.models import DeviceRule, GeneratorOptions, UdevMode

log = logging.getLogger(__name__)

INPUT_SUBSYSTEM_RULE = 'SUBSYSTEM=="input", GROUP="input", MODE="0660"'


def format_hex_id(value: int) -> str:
    return f"{int(value):04x}"


def access_clause(options: GeneratorOptions) -> str:
    if options.mode == UdevMode.session_access:
        return 'MODE:="660", TAG+="uaccess"'
    return f'MODE:="660", GROUP="{options.effective_group}"'


def rule_line(vendor_id: int, product_id: int | None, options: GeneratorOptions) -> str:
    # hidraw nodes only
    parts = ['KERNEL=="hidraw*"', f'ATTRS{{idVendor}}=="{format_hex_id(vendor_id)}"']
    if product_id is not None:
        parts.append(f'ATTRS{{idProduct}}=="{format_hex_id(product_id)}"')
    parts.append(access_clause(options))
    return ", ".join(parts) + "\n"


def count_rule_lines(rules: Iterable[DeviceRule]) -> int:
    return sum(1 if r.product_ids is None else len(set(r.product_ids)) for r in rules)


def generate_udev_file(rules: Iterable[DeviceRule], options: GeneratorOptions | None = None) -> str:
    """
    Render a udev rules file for the given device rules.

    Vendors are written in the order given; product ids within a vendor are
    sorted ascending. Wildcard rules produce a single line without idProduct.
    """
    opts = options if options is not None else GeneratorOptions()
    out = [INPUT_SUBSYSTEM_RULE + "\n", "\n"]
    for rule in rules:
        if rule.product_ids is None:
            out.append(rule_line(rule.vendor_id, None, opts))
            continue
        for pid in sorted(set(rule.product_ids)):
            out.append(rule_line(rule.vendor_id, pid, opts))
    log.debug("rendered %d device line(s) mode=%s", len(out) - 2, opts.mode.value)
    return "".join(out)
