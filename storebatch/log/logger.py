"""
The logger class for all StoreBatch modules, adding the ``INFO_EXTRA`` level and progress bars.
"""
import logging
import os
import sys
from collections.abc import Iterable
from typing import Any

from tqdm.auto import tqdm

from storebatch.log import INFO_EXTRA


class StoreBatchLogger(logging.Logger):
    """The logger for all logging operations in StoreBatch."""

    __slots__ = ()

    #: When true, all bars returned by :py:meth:`get_synchronous_iterator()` will be disabled by default
    disable_bars: bool = False
    #: All currently active progress bars
    _bars: list[tqdm] = []

    def info_extra(self, msg, *args, **kwargs) -> None:
        """Log 'msg % args' with severity 'INFO_EXTRA'."""
        if self.isEnabledFor(INFO_EXTRA):
            self._log(INFO_EXTRA, msg, args, **kwargs)

    def get_synchronous_iterator[T: Any](
            self, iterable: Iterable[T] | None = None, total: int | None = None, **kwargs
    ) -> tqdm:
        """
        Return an appropriately configured tqdm progress bar over the given ``iterable``.
        Give only ``total`` to create a bar which is advanced manually with ``update``.
        For tqdm kwargs, see :py:class:`tqdm`
        """
        bar = tqdm(iterable=iterable, **self._get_tqdm_kwargs(total=total, **kwargs))
        self._bars.append(bar)
        return bar

    def _get_tqdm_kwargs(self, **kwargs) -> dict[str, Any]:
        # noinspection SpellCheckingInspection
        preset_keys = ("leave", "disable", "file", "ncols", "colour", "smoothing")

        try:
            cols = os.get_terminal_size().columns
        except OSError:
            cols = 120

        kwargs["position"] = self._get_tqdm_param_position(**kwargs)
        return dict(
            leave=self._get_tqdm_param_leave(**kwargs),
            disable=self.disable_bars or kwargs.get("disable", False),
            file=sys.stdout,
            ncols=cols,
            colour=kwargs.get("colour", "green"),
            smoothing=0.1,
            **{k: v for k, v in kwargs.items() if k not in preset_keys}
        )

    def _get_tqdm_param_position(self, position: int = None, **__) -> int | None:
        if position is not None:
            return position

        # drop disabled and finished bars
        self._bars = [bar for bar in self._bars if not bar.disable and (bar.total is None or bar.n < bar.total)]
        if self._bars:
            return abs(min(bar.pos for bar in self._bars)) + 1

    @staticmethod
    def _get_tqdm_param_leave(position: int | None, leave: bool = None, **__) -> bool:
        if leave is not None:
            return leave
        return position is None or position == 0

    def __copy__(self):
        """Do not copy logger"""
        return self

    def __deepcopy__(self, _: dict = None):
        """Do not copy logger"""
        return self


logging.setLoggerClass(StoreBatchLogger)
