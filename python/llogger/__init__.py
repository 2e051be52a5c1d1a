__all__ = [
    "Config", "Emitter", "Logger", "NopLogger", "create",
    "Deadline", "Background", "DeadlineContext",
    "init", "shutdown", "get_logger",
]
__version__ = "0.1.0"

from .config import Config
from .context import Deadline, Background, DeadlineContext
from .emitter import Emitter, Logger, NopLogger, create
from .bootstrap import init, shutdown, get_logger
