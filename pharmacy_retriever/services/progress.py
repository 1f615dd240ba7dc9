from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display service with tqdm (TTY only).

Single tqdm instance per phase, disabled in non-TTY environments (CI, cron)
where the periodic INFO log lines are the only progress output.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """Check if TTY output is enabled.

    Returns:
        True if stdout is a TTY and progress should be displayed, False otherwise
    """
    return sys.stdout.isatty()


class ProgressTracker:
    """Progress tracker using tqdm for record or spreadsheet processing.

    In non-TTY environments progress bars are disabled to avoid ANSI control
    sequence spam in log files.
    """

    def __init__(self, total: int, *, description: str = "Processing", unit: str = "item") -> None:
        """Initialize progress tracker.

        Args:
            total: Total number of items to process
            description: Description for the progress bar
            unit: Unit label shown by tqdm
        """
        self.total = total
        self.description = description
        self.current = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total,
                desc=description,
                unit=unit,
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def advance(self, label: str | None = None) -> None:
        """Mark one item as done.

        Args:
            label: Optional short label of the item (shown as description)
        """
        self.current += 1
        if self.enabled and self.pbar is not None:
            if label:
                self.pbar.set_description(f"{self.description} ({label})")
            self.pbar.update(1)

    def set_postfix(self, **kwargs: Any) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        """Close the progress bar."""
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
