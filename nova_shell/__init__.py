"""NovaOS simulated desktop: window manager, file store client and record store."""

from .config import ShellConfig  # noqa: F401
from .exceptions import AuthFailure, RecordNotFound, StoreUnavailable  # noqa: F401
