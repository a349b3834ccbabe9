"""
Common utilities shared by all TBS subpackages: logging and errors.
"""

from .errors import *               # noqa: F401,F403
from .errors import __all__ as _errors_all
from .flog import Logger, get_global_logger

MODULE_DESCRIPTION  = "Shared utilities: formatted logging and the error taxonomy."
__all__             = ['Logger', 'get_global_logger', *_errors_all]
