import pytest

from scopebind import CircularDependencyError, Container, DependencyTrace, Marker, inject, injectable, registry


def test_run_pushes_and_restores_path():
    assert DependencyTrace.path() == ()

    def inner():
        assert DependencyTrace.path() == ("foo", "bar")
        return "result"

    assert DependencyTrace.run("foo", lambda: DependencyTrace.run("bar", inner)) == "result"
    assert DependencyTrace.path() == ()


def test_run_raises_minimal_cycle():
    def enter_foo_again():
        DependencyTrace.run("foo", lambda: None)

    with pytest.raises(CircularDependencyError) as exc_info:
        DependencyTrace.run("root", lambda: DependencyTrace.run("foo", lambda: DependencyTrace.run("bar", enter_foo_again)))

    assert exc_info.value.path == ["foo", "bar", "foo"]
    assert exc_info.value.container is None
    assert "in container <unknown>: foo➤bar➤foo" in str(exc_info.value)
    assert DependencyTrace.path() == ()


def test_run_restores_path_when_body_raises():
    def fail():
        msg = "nope"
        raise ValueError(msg)

    with DependencyTrace.frame("outer"):
        with pytest.raises(ValueError, match="nope"):
            DependencyTrace.run("inner", fail)
        assert DependencyTrace.path() == ("outer",)

    assert DependencyTrace.path() == ()


def test_frames_with_distinct_keys_and_same_label_are_not_cycles():
    def body():
        return DependencyTrace.run("db", DependencyTrace.path, key=object())

    assert DependencyTrace.run("db", body, key=object()) == ("db", "db")


def test_frames_with_same_key_are_cycles_whatever_the_label():
    key = object()

    with pytest.raises(CircularDependencyError) as exc_info:
        DependencyTrace.run("outer", lambda: DependencyTrace.run("inner", lambda: None, key=key), key=key)

    assert exc_info.value.path == ["outer", "inner"]


def test_sibling_frames_do_not_count_as_cycles():
    def body():
        DependencyTrace.run("leaf", lambda: None)
        DependencyTrace.run("leaf", lambda: None)
        return DependencyTrace.path()

    assert DependencyTrace.run("branch", body) == ("branch",)


class TestCircularInjectables:
    def test_direct_self_cycle(self):
        @injectable()
        class A:
            def __init__(self):
                self.a = inject(A)

        with pytest.raises(CircularDependencyError) as exc_info:
            inject(A)

        assert exc_info.value.path == ["A", "A"]
        assert exc_info.value.container == "root"
        assert "Circular dependency detected in container root: A➤A" in str(exc_info.value)

    def test_indirect_cycle_unwinds_trace(self):
        @injectable()
        class A:
            def __init__(self):
                self.b = inject(B)

        @injectable()
        class B:
            def __init__(self):
                self.a = inject(A)

        with pytest.raises(CircularDependencyError) as exc_info:
            inject(A)

        assert exc_info.value.path == ["A", "B", "A"]
        assert DependencyTrace.path() == ()
        assert not Container.current().has(A)
        assert not Container.current().has(B)

    def test_cycle_reports_container_where_it_was_discovered(self):
        registry.register("a", lambda: inject("b"))
        registry.register("b", lambda: inject("a"))

        def body():
            with pytest.raises(CircularDependencyError) as exc_info:
                inject("a")
            return exc_info.value

        with Container.current().scope("request"):
            error = body()

        assert error.container == "root➤request"
        assert error.path == ["a", "b", "a"]

    def test_trace_is_empty_after_constructor_failure(self):
        @injectable()
        class Broken:
            def __init__(self):
                msg = "broken"
                raise RuntimeError(msg)

        @injectable()
        class Consumer:
            def __init__(self):
                self.broken = inject(Broken)

        with pytest.raises(RuntimeError, match="broken"):
            inject(Consumer)

        assert DependencyTrace.path() == ()

    def test_same_named_classes_are_not_a_cycle(self):
        def make_config(value):
            class Config:
                def __init__(self):
                    self.value = value

            return Config

        inner_config = injectable()(make_config("inner"))
        outer_config = make_config("outer")

        def build_outer():
            config = outer_config()
            config.inner = inject(inner_config)
            return config

        registry.register(outer_config, build_outer)

        config = inject(outer_config)
        assert config.inner is inject(inner_config)
        assert config.inner.value == "inner"

    def test_markers_with_same_label_are_not_a_cycle(self):
        outer = Marker("db")
        inner = Marker("db")
        registry.register(inner, lambda: "connection")
        registry.register(outer, lambda: f"pool({inject(inner)})")

        assert inject(outer) == "pool(connection)"
