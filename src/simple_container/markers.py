"""能力标记模块。

类型通过标记声明自身能力（例如单例），而不是继承特定基类。
标记保存在类属性上，子类通过 MRO 继承父类的标记。
"""
from __future__ import annotations

from enum import Enum
from typing import TypeVar

T = TypeVar("T", bound=type)

_ATTR = "__container_capabilities__"


class Capability(Enum):
    """类型可声明的能力。"""

    SINGLETON = "singleton"


def capabilities_of(cls: type) -> frozenset[Capability]:
    """获取类型声明（含继承）的全部能力。"""
    caps = getattr(cls, _ATTR, None)
    if not isinstance(caps, frozenset):
        return frozenset()
    return caps


def has_capability(cls: type, capability: Capability) -> bool:
    """检查类型是否具备某项能力。"""
    return capability in capabilities_of(cls)


def mark(cls: T, *capabilities: Capability) -> T:
    """为类型附加能力标记。

    Args:
        cls: 目标类。
        *capabilities: 要附加的能力。

    Returns:
        原类对象，便于作为装饰器使用。

    Raises:
        TypeError: cls 不是类。
    """
    if not isinstance(cls, type):
        raise TypeError(f"Capabilities can only be attached to classes, got {cls!r}")
    setattr(cls, _ATTR, capabilities_of(cls) | frozenset(capabilities))
    return cls


def singleton(cls: T) -> T:
    """装饰器：声明类型为单例。

    容器首次成功构造该类型后缓存实例，之后的解析直接返回同一实例。

    Example:
        @singleton
        class ConsoleLogger:
            ...
    """
    return mark(cls, Capability.SINGLETON)


def is_singleton(cls: type) -> bool:
    return has_capability(cls, Capability.SINGLETON)
