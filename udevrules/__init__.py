from udevrules.common.models import DeviceRule, GeneratorOptions, UdevMode
from udevrules.generator import generate_udev_file
from udevrules.parser import UdevRuleGenerator, parse_udev_file

__all__ = [
    "DeviceRule",
    "GeneratorOptions",
    "UdevMode",
    "UdevRuleGenerator",
    "generate_udev_file",
    "parse_udev_file",
]
