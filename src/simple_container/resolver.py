"""依赖解析容器模块。

``Resolver`` 维护两张表：接口到实现类的绑定表，以及按具体类缓存的单例表。
解析时递归构造依赖图：接口依赖通过绑定表查找实现，具体类依赖直接递归构造，
声明 ``ContainerInterface`` 的依赖注入容器自身。

注意：单例命中缓存时，``resolve`` 传入的构造参数会被忽略，
单例对构造参数不敏感，始终返回首次构造的实例。
"""
from __future__ import annotations

import contextlib
import logging
import threading
import time
from typing import Any, ContextManager, Optional

from .config import ResolverConfig
from .errors import (
    ClassNotFoundError,
    CircularDependencyError,
    ImplementationNotFoundError,
    InjectionError,
    InterfaceNotFoundError,
    TypeMismatchError,
    describe_type,
)
from .interfaces import ContainerInterface
from .introspection import DependencyIntrospector, SignatureIntrospector
from .markers import is_singleton
from .models import DependencyDescriptor, DependencyKind
from .observability import build_observability, start_span
from .typeinfo import (
    TypeIdentity,
    implements_interface,
    is_concrete,
    is_interface,
    load_type,
)

logger = logging.getLogger(__name__)


class Resolver:
    """依赖注入容器。

    Args:
        config: 容器配置，None 时使用默认配置。
        introspector: 依赖内省实现，None 时使用 SignatureIntrospector。
        registry: Prometheus CollectorRegistry（仅在启用指标时使用）。
    """

    def __init__(
        self,
        config: Optional[ResolverConfig] = None,
        introspector: Optional[DependencyIntrospector] = None,
        *,
        registry: Any = None,
    ) -> None:
        self.config = config or ResolverConfig()
        self._bindings: dict[type, type] = {}
        self._singletons: dict[type, Any] = {}
        self._introspector: DependencyIntrospector = introspector or SignatureIntrospector(
            container_types={ContainerInterface, Resolver, type(self)}
        )
        self._lock: ContextManager[Any] = (
            threading.RLock() if self.config.thread_safe else contextlib.nullcontext()
        )
        self.obs = build_observability(self.config, registry)

    # ---------------- 绑定 ----------------

    def register(self, interface: TypeIdentity, implementation: TypeIdentity) -> None:
        """注册接口到实现类的绑定，重复注册同一接口会覆盖旧绑定。

        Args:
            interface: 接口标识（Protocol 或抽象基类）。
            implementation: 实现类标识。

        Raises:
            InterfaceNotFoundError: 接口不存在或不是接口。
            ClassNotFoundError: 实现类不存在。
            TypeMismatchError: 实现类没有实现接口。
        """
        iface = load_type(interface)
        if not is_interface(iface):
            raise InterfaceNotFoundError(
                f"Given interface <{describe_type(interface)}> not found or is not an interface"
            )
        impl = load_type(implementation)
        if not is_concrete(impl):
            raise ClassNotFoundError(f"Given class <{describe_type(implementation)}> not found")
        if not implements_interface(impl, iface):
            raise TypeMismatchError(
                f"Given class <{describe_type(impl)}> must implement the interface "
                f"<{describe_type(iface)}>"
            )
        with self._lock:
            previous = self._bindings.get(iface)
            self._bindings[iface] = impl
        if previous is not None and previous is not impl:
            logger.debug(
                "Rebound %s: %s -> %s",
                describe_type(iface),
                describe_type(previous),
                describe_type(impl),
            )
        else:
            logger.debug("Bound %s to %s", describe_type(iface), describe_type(impl))

    def get_binding(self, interface: TypeIdentity) -> Optional[type]:
        """返回接口当前绑定的实现类，未绑定时返回 None。"""
        iface = load_type(interface)
        if iface is None:
            return None
        return self._bindings.get(iface)

    def is_registered(self, interface: TypeIdentity) -> bool:
        return self.get_binding(interface) is not None

    def has_singleton(self, target: TypeIdentity) -> bool:
        cls = load_type(target)
        return cls is not None and cls in self._singletons

    @property
    def bindings(self) -> dict[type, type]:
        """绑定表副本。"""
        return dict(self._bindings)

    # ---------------- 解析 ----------------

    def resolve_by_interface(self, interface: TypeIdentity) -> Optional[Any]:
        """按接口解析实例。

        接口未绑定时返回 None 而不是抛出异常，由调用方决定是否致命。
        """
        with self._lock:
            return self._run(self._resolve_by_interface, interface, [])

    def resolve(self, target: TypeIdentity, *args: Any, **kwargs: Any) -> Any:
        """解析类型并返回完整注入依赖的实例。

        Args:
            target: 具体类标识。
            *args: 构造函数位置参数。
            **kwargs: 构造函数关键字参数。

        Returns:
            构造好的实例；单例类型命中缓存时忽略构造参数直接返回缓存实例。

        Raises:
            ClassNotFoundError: 目标类或某个依赖类不存在。
            ImplementationNotFoundError: 必需的接口依赖未注册实现。
            CircularDependencyError: 依赖图存在循环。
        """
        with self._lock:
            return self._run(self._resolve, target, args, kwargs, [])

    def _run(self, func: Any, target: TypeIdentity, *rest: Any) -> Any:
        """顶层解析：追踪、计时与失败统计。"""
        started = time.perf_counter()
        with start_span(self.obs, "container.resolve"):
            try:
                return func(target, *rest)
            except InjectionError as exc:
                logger.debug("Resolution of %s failed: %s", describe_type(target), exc)
                if self.obs.metrics_enabled:
                    self.obs.resolve_errors.labels(error=type(exc).__name__).inc()
                raise
            finally:
                if self.obs.metrics_enabled:
                    self.obs.resolve_seconds.observe(time.perf_counter() - started)

    def _resolve_by_interface(self, interface: TypeIdentity, chain: list[type]) -> Optional[Any]:
        iface = load_type(interface)
        implementation = self._bindings.get(iface) if iface is not None else None
        if implementation is None:
            return None
        return self._resolve(implementation, (), {}, chain)

    def _resolve(
        self,
        target: TypeIdentity,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        chain: list[type],
    ) -> Any:
        cls = load_type(target)
        if cls is not None and cls in self._singletons:
            if self.obs.metrics_enabled:
                self.obs.singleton_hits.inc()
            return self._singletons[cls]
        if not is_concrete(cls):
            raise ClassNotFoundError(f"The class {describe_type(target)} does not exist")
        if cls in chain:
            raise CircularDependencyError(chain[chain.index(cls):] + [cls])

        chain.append(cls)
        try:
            descriptors = self._introspector.get_dependencies(cls, self.config.hook_method)
            values = [self._resolve_dependency(cls, d, chain) for d in descriptors]
            instance = cls(*args, **kwargs)
            if descriptors:
                getattr(instance, self.config.hook_method)(*values)
        finally:
            chain.pop()

        self._check_for_singleton(cls, instance)
        if self.obs.metrics_enabled:
            self.obs.resolutions.labels(type=cls.__qualname__).inc()
        logger.debug("Constructed %s with %d dependencies", describe_type(cls), len(descriptors))
        return instance

    def _resolve_dependency(
        self, owner: type, descriptor: DependencyDescriptor, chain: list[type]
    ) -> Any:
        if descriptor.kind is DependencyKind.CONTAINER:
            return self

        target = load_type(descriptor.target)
        if is_interface(target):
            obj = self._resolve_by_interface(target, chain)
            if obj is None and not descriptor.optional:
                raise ImplementationNotFoundError(
                    f"No implementation for the interface {describe_type(target)} "
                    f"(parameter '{descriptor.name}' of {describe_type(owner)}). Please register."
                )
            return obj

        if not is_concrete(target) or descriptor.kind is DependencyKind.PRIMITIVE:
            raise ClassNotFoundError(
                f"Class {describe_type(descriptor.target)} for parameter "
                f"'{descriptor.name}' of {describe_type(owner)} does not exist"
            )
        return self._resolve(target, (), {}, chain)

    def _check_for_singleton(self, cls: type, instance: Any) -> None:
        if is_singleton(cls):
            self._singletons[cls] = instance
