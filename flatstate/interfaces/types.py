# flatstate/interfaces/types.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Callable, Tuple, Type, TypeVar, Union

T = TypeVar("T")

# Callback Types
StateAction = Callable[[], None]
Guard = Callable[[T], bool]
Action = Callable[[T], None]
Work = Callable[[], None]
ErrorHandler = Callable[[BaseException], None]

EventType = Union[Type[T], Tuple[type, ...]]
