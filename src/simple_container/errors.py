"""容器异常类。

定义依赖解析过程中的异常层次结构。所有异常在检测点抛出，
并原样向上传播，容器本身不做恢复或重试。
"""
from __future__ import annotations

from typing import Any, Sequence


def describe_type(identity: Any) -> str:
    """返回类型标识的可读名称（类对象或点分路径字符串）。"""
    if isinstance(identity, str):
        return identity
    module = getattr(identity, "__module__", None)
    qualname = getattr(identity, "__qualname__", None)
    if module and qualname:
        return f"{module}.{qualname}"
    return repr(identity)


class InjectionError(Exception):
    """依赖注入基础异常类。"""


class ClassNotFoundError(InjectionError):
    """引用的具体类不存在。"""


class InterfaceNotFoundError(InjectionError):
    """引用的接口不存在或不是接口类型。"""


class ImplementationNotFoundError(InjectionError):
    """必需的接口依赖没有注册实现。"""


class TypeMismatchError(InjectionError):
    """注册的实现类没有实现对应接口。"""


class CircularDependencyError(InjectionError):
    """解析链中出现循环依赖。

    Attributes:
        cycle: 构成循环的类型序列，首尾为同一类型。
    """

    def __init__(self, cycle: Sequence[Any]) -> None:
        self.cycle: tuple[Any, ...] = tuple(cycle)
        path = " -> ".join(describe_type(t) for t in self.cycle)
        super().__init__(f"Circular dependency detected: {path}")
