"""可观测性模块。

提供 Prometheus 指标和 OpenTelemetry 追踪支持，两者均为可选。
"""
from __future__ import annotations

import logging
import threading
import weakref
from dataclasses import dataclass
from types import TracebackType
from typing import Any

from .config import ResolverConfig

logger = logging.getLogger(__name__)

# 同一注册表内的指标只创建一次，多个容器共享
_metrics_lock = threading.Lock()
_metrics_by_registry: weakref.WeakKeyDictionary[Any, tuple[Any, Any, Any, Any]] = (
    weakref.WeakKeyDictionary()
)


@dataclass(slots=True)
class Observability:
    """可观测性配置。

    Attributes:
        enabled: 是否启用任何可观测性功能。
        metrics_enabled: 是否启用 Prometheus 指标。
        tracing_enabled: 是否启用追踪。
        resolve_seconds: 顶层解析耗时直方图。
        resolutions: 成功构造实例计数器（按类型）。
        singleton_hits: 单例缓存命中计数器。
        resolve_errors: 解析失败计数器（按异常类型）。
        tracer: OpenTelemetry 追踪器。
    """

    enabled: bool
    metrics_enabled: bool
    tracing_enabled: bool

    resolve_seconds: Any = None
    resolutions: Any = None
    singleton_hits: Any = None
    resolve_errors: Any = None

    tracer: Any = None


def build_observability(config: ResolverConfig, registry: Any = None) -> Observability:
    """构建可观测性实例。

    Args:
        config: 容器配置，读取 enable_metrics / enable_tracing / service_name。
        registry: Prometheus CollectorRegistry，None 时使用全局默认注册表。

    Returns:
        配置好的 Observability 实例。
    """
    metrics = bool(config.enable_metrics)
    tracing = bool(config.enable_tracing)

    obs = Observability(
        enabled=metrics or tracing, metrics_enabled=metrics, tracing_enabled=tracing
    )

    if metrics:
        try:
            (
                obs.resolve_seconds,
                obs.resolutions,
                obs.singleton_hits,
                obs.resolve_errors,
            ) = _get_metrics(registry)
        except (ImportError, ValueError) as exc:
            # ValueError: 同名指标已由其他组件注册
            logger.warning("Prometheus metrics disabled: %s", exc)
            obs.metrics_enabled = False

    if tracing:
        try:
            obs.tracer = _get_tracer(config.service_name)
        except ImportError as exc:
            logger.warning("Tracing disabled: %s", exc)
            obs.tracing_enabled = False

    obs.enabled = obs.metrics_enabled or obs.tracing_enabled
    return obs


def _get_metrics(registry: Any) -> tuple[Any, Any, Any, Any]:
    """获取注册表上的容器指标，首次调用时创建。"""
    from prometheus_client import REGISTRY, Counter, Histogram

    target = registry if registry is not None else REGISTRY
    with _metrics_lock:
        cached = _metrics_by_registry.get(target)
        if cached is not None:
            return cached
        metrics = (
            Histogram(
                "container_resolve_seconds",
                "Top-level resolve latency in seconds",
                registry=target,
            ),
            Counter(
                "container_resolutions_total",
                "Instances constructed by the container",
                labelnames=("type",),
                registry=target,
            ),
            Counter(
                "container_singleton_hits_total",
                "Singleton cache hits",
                registry=target,
            ),
            Counter(
                "container_resolve_errors_total",
                "Failed top-level resolutions",
                labelnames=("error",),
                registry=target,
            ),
        )
        _metrics_by_registry[target] = metrics
        return metrics


def _get_tracer(service_name: str) -> Any:
    """获取追踪器；全局 TracerProvider 只在尚未设置时安装一次。"""
    from opentelemetry import trace
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor

    if not isinstance(trace.get_tracer_provider(), TracerProvider):
        provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
        trace.set_tracer_provider(provider)
    return trace.get_tracer(__name__)


class NullSpan:
    """空 Span，用于追踪未启用时的占位。"""

    def __enter__(self) -> NullSpan:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        return False


def start_span(obs: Observability, name: str) -> Any:
    """启动一个追踪 Span。

    Args:
        obs: 可观测性实例。
        name: Span 名称。

    Returns:
        Span 上下文管理器。
    """
    if obs.tracing_enabled and obs.tracer is not None:
        return obs.tracer.start_as_current_span(name)
    return NullSpan()
