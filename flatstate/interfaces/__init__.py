# flatstate/interfaces/__init__.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from flatstate.interfaces.protocols import Executor

__all__ = ["Executor"]
