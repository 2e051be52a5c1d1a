# Process-wide defaults, set once at cold start and shared by every invocation.
import sys
from typing import Optional, Dict, Any
from .config import Config
from .emitter import Emitter

_global_cfg: Config = Config()
_global_fields: Dict[str, Any] = {}

def init(
    service_name: str,
    service_version: str = "",
    environment: str = "dev",
    config: Optional[Config] = None,
    **fields: Any,
) -> None:
    """Set the default fields and config used by ``get_logger``.

    ``service_name``, ``service_version`` and ``environment`` are emitted as
    ``service``, ``version`` and ``env``; empty values are left out. Extra
    keyword arguments are added as default fields too.
    """
    global _global_cfg, _global_fields
    base = {"service": service_name, "version": service_version, "env": environment}
    _global_fields = {k: v for k, v in base.items() if v}
    _global_fields.update(fields)
    _global_cfg = config or Config()

def get_logger(context: Any = None, **fields: Any) -> Emitter:
    """New Emitter for one invocation; ``fields`` override the process defaults."""
    merged = dict(_global_fields)
    merged.update(fields)
    return Emitter(context, merged, _global_cfg, stacklevel=2)

def shutdown() -> None:
    """Flush stdout and forget the process defaults."""
    global _global_cfg, _global_fields
    try:
        sys.stdout.flush()
    except (OSError, ValueError):
        pass
    _global_cfg = Config()
    _global_fields = {}
