from typing import Optional, Protocol

from simple_container import (
    ContainerInterface,
    DependencyKind,
    SignatureIntrospector,
)


class Clock(Protocol):
    def now(self) -> float:
        ...


class Disk:
    pass


class Mixed:
    def inject(
        self,
        clock: Clock,
        disk: Disk,
        maybe_clock: Optional[Clock],
        maybe_disk: "Disk | None",
        count: int,
        raw,
        container: ContainerInterface,
        *extra,
        **options,
    ) -> None:
        pass


class NoHook:
    pass


class NotCallableHook:
    inject = "not a method"


class StaticHook:
    @staticmethod
    def inject(disk: Disk) -> None:
        pass


class ClassHook:
    @classmethod
    def inject(cls, disk: Disk) -> None:
        pass


class UnresolvedRef:
    def inject(self, ghost: "Phantom", disk: "Disk") -> None:  # noqa: F821
        pass


class CustomHook:
    def wire(self, clock: Clock) -> None:
        pass


def test_descriptors_follow_declaration_order():
    deps = SignatureIntrospector().get_dependencies(Mixed)
    assert [d.name for d in deps] == [
        "clock",
        "disk",
        "maybe_clock",
        "maybe_disk",
        "count",
        "raw",
        "container",
    ]


def test_descriptor_kinds_and_optionality():
    deps = {d.name: d for d in SignatureIntrospector().get_dependencies(Mixed)}

    assert deps["clock"].kind is DependencyKind.INTERFACE
    assert deps["clock"].target is Clock
    assert not deps["clock"].optional

    assert deps["disk"].kind is DependencyKind.CLASS
    assert deps["disk"].target is Disk

    assert deps["maybe_clock"].kind is DependencyKind.INTERFACE
    assert deps["maybe_clock"].optional

    assert deps["maybe_disk"].target is Disk
    assert deps["maybe_disk"].optional

    assert deps["count"].kind is DependencyKind.PRIMITIVE
    assert deps["raw"].kind is DependencyKind.PRIMITIVE
    assert deps["raw"].target is None
    assert deps["container"].kind is DependencyKind.CONTAINER


def test_missing_hook_or_type_yields_no_dependencies():
    introspector = SignatureIntrospector()
    assert introspector.get_dependencies(NoHook) == []
    assert introspector.get_dependencies(NotCallableHook) == []
    assert introspector.get_dependencies("missing.module.Type") == []
    assert introspector.get_dependencies(Mixed, "no_such_method") == []


def test_static_and_class_method_hooks():
    introspector = SignatureIntrospector()
    for cls in (StaticHook, ClassHook):
        deps = introspector.get_dependencies(cls)
        assert [(d.name, d.target) for d in deps] == [("disk", Disk)]


def test_unresolved_forward_reference_keeps_name():
    deps = SignatureIntrospector().get_dependencies(UnresolvedRef)
    assert deps[0].kind is DependencyKind.CLASS
    assert deps[0].target == "Phantom"
    assert deps[1].target is Disk


def test_custom_hook_name_and_container_types():
    introspector = SignatureIntrospector(container_types=(Clock,))
    deps = introspector.get_dependencies(CustomHook, "wire")
    assert deps[0].kind is DependencyKind.CONTAINER


def test_dotted_path_target():
    deps = SignatureIntrospector().get_dependencies(f"{__name__}.Mixed")
    assert len(deps) == 7
