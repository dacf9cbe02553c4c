"""Default classes and props for the NiceGUI elements used by the box plot panel."""

from __future__ import annotations

from nicegui import ui

from niceboxplot.utils.logging import get_logger

logger = get_logger(__name__)

# tailwind text size -> quasar size
_QUASAR_SIZES = {
    "text-xs": "xs",
    "text-sm": "sm",
    "text-base": "md",
    "text-lg": "lg",
}


def setUpGuiDefaults(text_size: str = "text-sm") -> None:
    """Set default classes and props for labels, menus and the popout radio group.

    Args:
        text_size: Tailwind CSS text size class ('text-xs', 'text-sm',
            'text-base' or 'text-lg').

    Raises:
        ValueError: If text_size is not one of the supported classes.
    """
    if text_size not in _QUASAR_SIZES:
        raise ValueError(f"Unsupported text_size {text_size!r}; expected one of {sorted(_QUASAR_SIZES)}")
    text_size_quasar = _QUASAR_SIZES[text_size]

    logger.debug(f'using classes text_size:"{text_size}" text_size_quasar:{text_size_quasar}')

    ui.label.default_classes(f"{text_size} select-text")
    ui.label.default_props("dense")
    #
    ui.menu.default_classes(text_size)
    ui.menu.default_props("dense")
    #
    ui.radio.default_classes(text_size)
    ui.radio.default_props(f"dense size={text_size_quasar}")
