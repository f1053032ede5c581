"""simple_container: 极简的控制反转容器。

这个包负责：
- Resolver：接口绑定、递归依赖解析、单例缓存
- 能力标记（@singleton）
- 依赖内省协议与基于签名的默认实现
- 异常层次、配置、日志与可选的可观测性
"""

from .config import ResolverConfig, configure_logging
from .errors import (
    CircularDependencyError,
    ClassNotFoundError,
    ImplementationNotFoundError,
    InjectionError,
    InterfaceNotFoundError,
    TypeMismatchError,
)
from .interfaces import ContainerInterface
from .introspection import DependencyIntrospector, SignatureIntrospector
from .markers import Capability, has_capability, mark, singleton
from .models import DependencyDescriptor, DependencyKind
from .resolver import Resolver

__all__ = [
    "Capability",
    "CircularDependencyError",
    "ClassNotFoundError",
    "ContainerInterface",
    "DependencyDescriptor",
    "DependencyIntrospector",
    "DependencyKind",
    "ImplementationNotFoundError",
    "InjectionError",
    "InterfaceNotFoundError",
    "Resolver",
    "ResolverConfig",
    "SignatureIntrospector",
    "TypeMismatchError",
    "configure_logging",
    "has_capability",
    "mark",
    "singleton",
]
