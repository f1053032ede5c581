"""依赖内省模块。

容器只依赖 ``DependencyIntrospector`` 协议给出的依赖描述，
不关心具体的元数据来源。默认实现 ``SignatureIntrospector``
基于 ``inspect.signature`` 与类型注解读取注入钩子的参数。
"""
from __future__ import annotations

import inspect
import logging
import types
import typing
from typing import Any, Iterable, Protocol, Union

from .interfaces import ContainerInterface
from .models import DependencyDescriptor, DependencyKind
from .typeinfo import is_interface, load_type

logger = logging.getLogger(__name__)

DEFAULT_HOOK_METHOD = "inject"

_NONE_TYPE = type(None)


class DependencyIntrospector(Protocol):
    """依赖内省协议。

    给定类型标识与钩子方法名，按声明顺序返回依赖描述列表。
    类型或钩子不存在时必须返回空列表而不是抛出异常。
    """

    def get_dependencies(
        self, target: Any, method_name: str = DEFAULT_HOOK_METHOD
    ) -> list[DependencyDescriptor]:
        ...


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """拆解 ``Optional[X]`` / ``X | None``，返回 (内部类型, 是否可空)。"""
    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = typing.get_args(annotation)
        non_none = [a for a in args if a is not _NONE_TYPE]
        optional = len(non_none) < len(args)
        if len(non_none) == 1:
            return non_none[0], optional
        # 多类型联合无法确定注入目标
        return annotation, optional
    return annotation, False


def _evaluate_annotation(annotation: Any, hook: Any, owner: type) -> Any:
    """在钩子所在模块的命名空间中单独求值一个字符串注解。

    求值失败时返回原字符串，其余参数不受影响。
    """
    if not isinstance(annotation, str):
        return annotation
    globalns = getattr(inspect.unwrap(hook), "__globals__", {})
    try:
        return eval(annotation, globalns, dict(vars(owner)))
    except Exception as exc:
        logger.debug("Annotation %r left unresolved: %s", annotation, exc)
        return annotation


class SignatureIntrospector:
    """基于函数签名与类型注解的内省实现。

    Args:
        container_types: 视为"容器自身"的类型，对应参数被描述为 CONTAINER。
    """

    def __init__(self, container_types: Iterable[type] = (ContainerInterface,)) -> None:
        self._container_types: tuple[type, ...] = tuple(container_types)

    def get_dependencies(
        self, target: Any, method_name: str = DEFAULT_HOOK_METHOD
    ) -> list[DependencyDescriptor]:
        cls = load_type(target)
        if cls is None:
            return []
        hook = getattr(cls, method_name, None)
        if hook is None or not callable(hook):
            return []

        try:
            signature = inspect.signature(hook)
        except (TypeError, ValueError):
            logger.debug("Cannot read signature of %s.%s", cls.__qualname__, method_name)
            return []

        try:
            hints = typing.get_type_hints(hook)
        except Exception as exc:
            # 存在无法解析的前向引用时逐个参数求值，只有失败的参数保留原始字符串
            logger.debug("Type hints of %s.%s unresolved: %s", cls.__qualname__, method_name, exc)
            hints = None

        params = list(signature.parameters.values())
        # 普通实例方法从类上取得时签名仍含 self
        if inspect.isfunction(inspect.getattr_static(cls, method_name, None)) and params:
            params = params[1:]

        out: list[DependencyDescriptor] = []
        for param in params:
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            if hints is not None:
                annotation = hints.get(param.name, param.annotation)
            else:
                annotation = _evaluate_annotation(param.annotation, hook, cls)
            out.append(self._describe(param.name, annotation, hook))
        return out

    def _describe(self, name: str, annotation: Any, hook: Any) -> DependencyDescriptor:
        if annotation is inspect.Parameter.empty:
            return DependencyDescriptor(name=name, kind=DependencyKind.PRIMITIVE)

        if isinstance(annotation, str):
            return self._describe_forward_ref(name, annotation, hook)

        inner, optional = _unwrap_optional(annotation)
        if isinstance(inner, typing.ForwardRef):
            inner = inner.__forward_arg__

        if isinstance(inner, str):
            descriptor = self._describe_forward_ref(name, inner, hook)
            return DependencyDescriptor(
                name=name, kind=descriptor.kind, target=descriptor.target, optional=optional
            )

        if not isinstance(inner, type):
            return DependencyDescriptor(
                name=name, kind=DependencyKind.PRIMITIVE, target=inner, optional=optional
            )
        if inner in self._container_types:
            kind = DependencyKind.CONTAINER
        elif is_interface(inner):
            kind = DependencyKind.INTERFACE
        elif inner.__module__ == "builtins":
            kind = DependencyKind.PRIMITIVE
        else:
            kind = DependencyKind.CLASS
        return DependencyDescriptor(name=name, kind=kind, target=inner, optional=optional)

    def _describe_forward_ref(self, name: str, ref: str, hook: Any) -> DependencyDescriptor:
        cls = load_type(ref) or load_type(f"{getattr(hook, '__module__', '')}.{ref}")
        if cls is None:
            # 目标不存在，由容器按 ClassNotFoundError 处理
            return DependencyDescriptor(name=name, kind=DependencyKind.CLASS, target=ref)
        return self._describe(name, cls, hook)
