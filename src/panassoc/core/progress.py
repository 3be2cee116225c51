"""Progress bar for long per-k-mer scans."""

import sys
from collections.abc import Iterable, Iterator
from typing import TypeVar

import progressbar

T = TypeVar("T")


def progress_iterator(
    iterable: Iterable[T], total: int, desc: str = "", enabled: bool = True
) -> Iterator[T]:
    """Wrap an iterable with a progressbar2 display on stdout.

    The bar is finalized in a try/finally block so that early breaks or
    exceptions from the caller don't leave terminal output corrupted.

    Args:
        iterable: Items to wrap.
        total: Total number of items.
        desc: Optional description prefix.
        enabled: When False the items are passed through untouched and no
            bar is created.

    Yields:
        Items from the wrapped iterable.
    """
    if not enabled or total <= 0:
        yield from iterable
        return

    widgets = [
        f"{desc}: " if desc else "",
        progressbar.Counter(),
        f"/{total} ",
        progressbar.Percentage(),
        " ",
        progressbar.Bar(),
        " ",
        progressbar.ETA(),
    ]
    bar = progressbar.ProgressBar(max_value=total, widgets=widgets, fd=sys.stdout)
    bar.start()
    try:
        for i, item in enumerate(iterable):
            yield item
            bar.update(i + 1)
    finally:
        bar.finish()
