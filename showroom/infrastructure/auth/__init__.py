# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .login_attempts import LoginAttemptsTracker
from .token_denylist import InMemoryTokenDenylist

__all__ = ["InMemoryTokenDenylist", "LoginAttemptsTracker"]
