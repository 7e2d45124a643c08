from __future__ import annotations

from .core import *  # noqa: F401,F403
from .commands import *  # noqa: F401,F403
