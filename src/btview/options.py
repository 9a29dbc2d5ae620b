"""Display option state of a backtrace panel."""

from dataclasses import dataclass

from btview.config import Settings


@dataclass(slots=True)
class DisplayOptions:
    """
    Per-panel display toggles.

    ``demangle`` and ``show_full_path`` are flipped by the user; the other
    fields are read from the settings once, when the panel is created.
    """

    demangle: bool = True
    show_full_path: bool = False
    demangle_available: bool = True
    highlight_base_name: bool = True
    show_thread_names: bool = False

    @classmethod
    def from_settings(cls, settings: Settings, demangle_available: bool = True) -> "DisplayOptions":
        """Build the initial options from application settings."""
        return cls(
            demangle=True,
            show_full_path=settings.show_program_path,
            demangle_available=demangle_available,
            highlight_base_name=settings.highlight_base_name,
            show_thread_names=settings.show_thread_names,
        )

    def toggle_demangle(self) -> bool:
        """Flip demangling. Returns False if demangling is unavailable."""
        if not self.demangle_available:
            return False
        self.demangle = not self.demangle
        return True

    def toggle_full_path(self) -> bool:
        """Flip between module basenames and full paths."""
        self.show_full_path = not self.show_full_path
        return True
