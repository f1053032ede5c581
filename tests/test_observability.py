from typing import Protocol

import pytest
from prometheus_client import CollectorRegistry

from simple_container import ImplementationNotFoundError, Resolver, ResolverConfig, singleton
from simple_container.observability import NullSpan, build_observability, start_span


class Sink(Protocol):
    def write(self, data: bytes) -> None:
        ...


@singleton
class Clock:
    pass


class Pump:
    pass


class Station:
    def inject(self, pump: Pump, clock: Clock) -> None:
        self.pump = pump
        self.clock = clock


class Exporter:
    def inject(self, sink: Sink) -> None:
        self.sink = sink


def test_disabled_by_default():
    obs = build_observability(ResolverConfig())
    assert not obs.enabled
    assert isinstance(start_span(obs, "noop"), NullSpan)


def test_metrics_are_recorded():
    registry = CollectorRegistry()
    r = Resolver(ResolverConfig(enable_metrics=True), registry=registry)

    r.resolve(Station)
    r.resolve(Station)

    assert registry.get_sample_value("container_resolutions_total", {"type": "Station"}) == 2.0
    assert registry.get_sample_value("container_resolutions_total", {"type": "Pump"}) == 2.0
    assert registry.get_sample_value("container_resolutions_total", {"type": "Clock"}) == 1.0
    assert registry.get_sample_value("container_singleton_hits_total") == 1.0
    assert registry.get_sample_value("container_resolve_seconds_count") == 2.0


def test_errors_are_counted():
    registry = CollectorRegistry()
    r = Resolver(ResolverConfig(enable_metrics=True), registry=registry)

    with pytest.raises(ImplementationNotFoundError):
        r.resolve(Exporter)

    assert (
        registry.get_sample_value(
            "container_resolve_errors_total", {"error": "ImplementationNotFoundError"}
        )
        == 1.0
    )


def test_containers_share_metrics_on_one_registry():
    registry = CollectorRegistry()
    config = ResolverConfig(enable_metrics=True)
    first = Resolver(config, registry=registry)
    second = Resolver(config, registry=registry)

    assert first.obs.metrics_enabled
    assert second.obs.metrics_enabled
    assert first.obs.resolutions is second.obs.resolutions

    first.resolve(Pump)
    second.resolve(Pump)
    assert registry.get_sample_value("container_resolutions_total", {"type": "Pump"}) == 2.0


def test_tracing_provider_is_installed_once():
    from opentelemetry import trace

    first = build_observability(ResolverConfig(enable_tracing=True, service_name="test"))
    provider = trace.get_tracer_provider()
    second = build_observability(ResolverConfig(enable_tracing=True, service_name="other"))

    assert first.tracing_enabled
    assert second.tracing_enabled
    assert trace.get_tracer_provider() is provider
    with start_span(second, "container.resolve"):
        pass
