from .models import (
    DEFAULT_GROUP,
    MAX_USB_ID,
    DeviceRule,
    GeneratorOptions,
    UdevMode,
)

__all__ = [
    "DEFAULT_GROUP",
    "DeviceRule",
    "GeneratorOptions",
    "MAX_USB_ID",
    "UdevMode",
]
