"""Helper platform recognition for composite ``platform.local_id`` identifiers."""

from __future__ import annotations

HELPER_PLATFORMS: tuple[str, ...] = (
    # Input helpers
    "input_boolean",
    "input_number",
    "input_text",
    "input_select",
    "input_datetime",
    "input_button",
    # Other helpers
    "counter",
    "timer",
    "schedule",
    "group",
    "template",
    "threshold",
    "derivative",
    "integration",
)


def parse_helper_entity_id(entity_id: str) -> tuple[str, str]:
    """Split *entity_id* into ``(platform, local_id)``.

    Only the known helper platforms are recognised; anything else, such as
    ``light.kitchen``, yields ``("", "")``.
    """
    for platform in HELPER_PLATFORMS:
        prefix = platform + "."
        if entity_id.startswith(prefix):
            return platform, entity_id[len(prefix) :]
    return "", ""


def is_helper_platform(platform: str) -> bool:
    return platform in HELPER_PLATFORMS
