"""
Formatted logging for TBS.

A thin layer over the standard :mod:`logging` module that adds indentation
levels and ANSI colors to messages. Classes of the package keep a private
``_log`` method that forwards to :meth:`Logger.say`.

Usage
-----
    from TBS.common.flog import get_global_logger

    log = get_global_logger()
    log.say("Diagonalizing...", log='info', lvl=1)
    log.info(log.colorize("done", "green"))

The default level is read from the ``TBS_LOG_LEVEL`` environment variable
(``debug``, ``info``, ``warning``, ``error``) and falls back to ``info``.

--------------------------------------------------
File        : TBS/common/flog.py
Description : Logger used across the package.
--------------------------------------------------
"""

import os
import sys
import logging
from typing import Optional, Union, TextIO

####################################################################################################

class Logger:
    """
    Logger with indentation levels and colored output.

    Parameters
    ----------
    name : str
        Name of the underlying :class:`logging.Logger`.
    level : int or str
        Minimal level that is emitted.
    use_color : bool, optional
        Whether ``colorize`` inserts ANSI escape codes. By default colors
        are used only when the stream is a terminal.
    stream : TextIO, optional
        Output stream of the handler (default: ``sys.stderr``).
    """

    LEVELS      = {
        logging.DEBUG       : 'debug',
        logging.INFO        : 'info',
        logging.WARNING     : 'warning',
        logging.ERROR       : 'error',
    }
    LEVELS_R    = {v: k for k, v in LEVELS.items()}

    COLORS      = {
        'white'     : '\033[97m',
        'red'       : '\033[91m',
        'green'     : '\033[92m',
        'yellow'    : '\033[93m',
        'blue'      : '\033[94m',
        'cyan'      : '\033[96m',
        'gray'      : '\033[90m',
    }
    _RESET      = '\033[0m'
    _INDENT     = '  '

    def __init__(self,
                name        : str                       = 'TBS',
                level       : Union[int, str]           = logging.INFO,
                use_color   : Optional[bool]            = None,
                stream      : Optional[TextIO]          = None):
        self._logger        = logging.getLogger(name)
        self._stream        = stream if stream is not None else sys.stderr
        self._use_color     = use_color if use_color is not None else self._stream.isatty()
        if not self._logger.handlers:
            handler         = logging.StreamHandler(self._stream)
            handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", "%H:%M:%S"))
            self._logger.addHandler(handler)
            self._logger.propagate = False
        self.set_level(level)

    # ------------------------------------------------------------------

    @staticmethod
    def level_of(level: Union[int, str]) -> int:
        ''' Convert a level name to its numeric value '''
        if isinstance(level, str):
            return Logger.LEVELS_R.get(level.lower(), logging.INFO)
        return int(level)

    def set_level(self, level: Union[int, str]) -> None:
        self._logger.setLevel(self.level_of(level))

    @property
    def level(self) -> int:
        return self._logger.level

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    # ------------------------------------------------------------------

    def colorize(self, msg: str, color: str) -> str:
        """Wrap the message in ANSI color codes (no-op when colors are off or the color is unknown)."""
        if not self._use_color or color not in self.COLORS:
            return msg
        return f"{self.COLORS[color]}{msg}{self._RESET}"

    def say(self, *msgs, log: Union[int, str] = logging.INFO, lvl: int = 0) -> None:
        """
        Emit messages at the given level.

        Parameters
        ----------
        *msgs : str
            Messages, each logged on its own line.
        log : int or str
            Logging level ('debug', 'info', 'warning', 'error' or a number).
        lvl : int
            Indentation level of the message.
        """
        level   = self.level_of(log)
        if not self._logger.isEnabledFor(level):
            return
        indent  = self._INDENT * max(lvl, 0)
        for msg in msgs:
            self._logger.log(level, f"{indent}{msg}")

    def debug(self, msg: str, lvl: int = 0) -> None:      self.say(msg, log=logging.DEBUG, lvl=lvl)
    def info(self, msg: str, lvl: int = 0) -> None:       self.say(msg, log=logging.INFO, lvl=lvl)
    def warning(self, msg: str, lvl: int = 0) -> None:    self.say(msg, log=logging.WARNING, lvl=lvl)
    def error(self, msg: str, lvl: int = 0) -> None:      self.say(msg, log=logging.ERROR, lvl=lvl)

####################################################################################################

def get_global_logger(**kwargs) -> Logger:
    """
    Create a Logger configured from the environment.

    Keyword arguments are forwarded to :class:`Logger`. Prefer
    :func:`TBS.tbs_globals.get_logger`, which caches the instance.
    """
    kwargs.setdefault('level', os.environ.get('TBS_LOG_LEVEL', 'info'))
    return Logger(**kwargs)

# --------------------------------------------------------------------------------------------------
#! EOF
# --------------------------------------------------------------------------------------------------
