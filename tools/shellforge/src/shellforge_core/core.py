#!/usr/bin/env python3
from __future__ import annotations

from ._core_base import *  # noqa: F401,F403
from ._core_model import *  # noqa: F401,F403
from ._core_sanitize import *  # noqa: F401,F403
from ._core_help import *  # noqa: F401,F403
from ._core_banner import *  # noqa: F401,F403
from ._core_commands import *  # noqa: F401,F403
from ._core_bash import *  # noqa: F401,F403
from ._core_batch import *  # noqa: F401,F403
from ._core_wrappers import *  # noqa: F401,F403
from ._core_orchestration import *  # noqa: F401,F403
