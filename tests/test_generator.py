from __future__ import annotations

from udevrules.common.models import DeviceRule, GeneratorOptions, UdevMode
from udevrules.generator import INPUT_SUBSYSTEM_RULE, count_rule_lines, format_hex_id, generate_udev_file
from udevrules.parser import parse_udev_file


def test_session_access_specific_products_sorted():
    rules = [DeviceRule(vendor_id=0xFFFF, product_ids=[0x1F41, 0x1F40])]
    out = generate_udev_file(rules, GeneratorOptions(mode=UdevMode.session_access))
    assert out == (
        'SUBSYSTEM=="input", GROUP="input", MODE="0660"\n'
        "\n"
        'KERNEL=="hidraw*", ATTRS{idVendor}=="ffff", ATTRS{idProduct}=="1f40", MODE:="660", TAG+="uaccess"\n'
        'KERNEL=="hidraw*", ATTRS{idVendor}=="ffff", ATTRS{idProduct}=="1f41", MODE:="660", TAG+="uaccess"\n'
    )


def test_restricted_group_with_custom_group():
    rules = [DeviceRule(vendor_id=0x0FD9, product_ids=[0x0060, 0x0063])]
    out = generate_udev_file(rules, GeneratorOptions(mode="restricted-group", group_name="companion"))
    assert 'KERNEL=="hidraw*", ATTRS{idVendor}=="0fd9", ATTRS{idProduct}=="0060", MODE:="660", GROUP="companion"\n' in out
    assert 'KERNEL=="hidraw*", ATTRS{idVendor}=="0fd9", ATTRS{idProduct}=="0063", MODE:="660", GROUP="companion"\n' in out


def test_restricted_group_defaults_to_plugdev():
    rules = [DeviceRule(vendor_id=0x0FD9, product_ids=[0x0060])]
    for opts in (GeneratorOptions(), GeneratorOptions(group_name=""), None):
        out = generate_udev_file(rules, opts)
        assert out.endswith('ATTRS{idProduct}=="0060", MODE:="660", GROUP="plugdev"\n')


def test_wildcard_line():
    out = generate_udev_file([DeviceRule(vendor_id=0xABCD)], GeneratorOptions(mode="session-access"))
    lines = out.splitlines()
    assert lines == [
        INPUT_SUBSYSTEM_RULE,
        "",
        'KERNEL=="hidraw*", ATTRS{idVendor}=="abcd", MODE:="660", TAG+="uaccess"',
    ]


def test_vendor_order_is_kept():
    rules = [DeviceRule(vendor_id=0x2000), DeviceRule(vendor_id=0x0001, product_ids=[2])]
    lines = generate_udev_file(rules).splitlines()[2:]
    assert '"2000"' in lines[0]
    assert '"0001"' in lines[1] and '"0002"' in lines[1]


def test_empty_rules_render_header_only():
    assert generate_udev_file([]) == INPUT_SUBSYSTEM_RULE + "\n\n"


def test_format_hex_id():
    assert format_hex_id(10) == "000a"
    assert format_hex_id(0) == "0000"
    assert format_hex_id(0xBEEF) == "beef"


def test_legacy_mode_names_and_unknown_mode():
    assert GeneratorOptions(mode="desktop").mode is UdevMode.session_access
    assert GeneratorOptions(mode="headless").mode is UdevMode.restricted_group
    assert GeneratorOptions(mode="kiosk").mode is UdevMode.restricted_group
    assert GeneratorOptions(mode=None).mode is UdevMode.restricted_group


def test_render_then_parse_keeps_mapping():
    source = """
      SUBSYSTEM=="usb", ATTRS{idVendor}=="0fd9", ATTRS{idProduct}=="0063"
      SUBSYSTEM=="usb", ATTRS{idVendor}=="0fd9", ATTRS{idProduct}=="0060"
      SUBSYSTEM=="usb", ATTRS{idVendor}=="05f3"
      SUBSYSTEM=="usb", ATTRS{idVendor}=="1edb", ATTRS{idProduct}=="bef0"
    """
    first = parse_udev_file(source)
    for mode in UdevMode:
        again = parse_udev_file(generate_udev_file(first.values(), GeneratorOptions(mode=mode)))
        assert list(again) == list(first)
        for vid, rule in first.items():
            expected = None if rule.product_ids is None else sorted(rule.product_ids)
            assert again[vid].product_ids == expected


def test_duplicate_product_ids_are_collapsed():
    rule = DeviceRule(vendor_id=1, product_ids=[5, 3, 5])
    assert rule.product_ids == [5, 3]
    out = generate_udev_file([rule])
    assert out.count('ATTRS{idProduct}=="0005"') == 1
    assert out.count('ATTRS{idProduct}=="0003"') == 1


def test_duplicates_appended_after_construction_render_once():
    rule = DeviceRule(vendor_id=1, product_ids=[5])
    rule.product_ids.append(5)
    assert generate_udev_file([rule]).count('ATTRS{idProduct}=="0005"') == 1
    assert count_rule_lines([rule, DeviceRule(vendor_id=2)]) == 2


def test_non_string_group_falls_back_to_plugdev():
    opts = GeneratorOptions(group_name=123)
    assert opts.group_name is None
    assert opts.effective_group == "plugdev"
