from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class DependencyKind(Enum):
    """依赖描述的类别"""

    CLASS = "class"
    INTERFACE = "interface"
    CONTAINER = "container"
    PRIMITIVE = "primitive"


@dataclass(frozen=True, slots=True)
class DependencyDescriptor:
    """注入钩子单个参数的依赖描述

    Attributes:
        name: 参数名。
        kind: 依赖类别。
        target: 目标类型（类对象、无法解析的名称字符串或 None）。
        optional: 参数注解是否允许 None。
    """

    name: str
    kind: DependencyKind
    target: Any = None
    optional: bool = False
