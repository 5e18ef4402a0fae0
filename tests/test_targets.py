"""
Marker target classification (controller/targets.py).
"""

from types import SimpleNamespace

from rpc_controllers.controller.targets import (
    ClassTarget,
    ContextTarget,
    DecoratorContext,
    DeferredTarget,
    MethodTarget,
    ParamTarget,
    Unresolved,
    classify_target,
    is_decorator_context,
)


class Sample:
    def handler(self, call):
        return call


class TestIsDecoratorContext:

    def test_dataclass_context(self):
        assert is_decorator_context(DecoratorContext(kind="method", name="x"))

    def test_duck_typed_context(self):
        assert is_decorator_context(SimpleNamespace(kind="class", name="Sample"))

    def test_plain_values_are_not_contexts(self):
        assert not is_decorator_context("handler")
        assert not is_decorator_context(0)
        assert not is_decorator_context(None)
        assert not is_decorator_context(Sample)


class TestClassifyTarget:

    def test_context_pair(self):
        ctx = DecoratorContext(kind="class", name="Sample")
        target = classify_target((Sample, ctx))
        assert isinstance(target, ContextTarget)
        assert target.is_class

    def test_method_context_is_not_class(self):
        ctx = DecoratorContext(kind="method", name="handler")
        assert not classify_target((Sample.handler, ctx)).is_class

    def test_class(self):
        assert classify_target((Sample,)) == ClassTarget(Sample)

    def test_function_is_deferred(self):
        target = classify_target((Sample.handler,))
        assert isinstance(target, DeferredTarget)
        assert target.member is Sample.handler

    def test_staticmethod_is_deferred(self):
        member = staticmethod(lambda call: call)
        assert isinstance(classify_target((member,)), DeferredTarget)

    def test_method_from_class(self):
        assert classify_target((Sample, "handler")) == MethodTarget(Sample, "handler")

    def test_method_from_instance_uses_its_class(self):
        assert classify_target((Sample(), "handler")) == MethodTarget(Sample, "handler")

    def test_method_with_none_index(self):
        assert classify_target((Sample, "handler", None)) == MethodTarget(Sample, "handler")

    def test_param(self):
        assert classify_target((Sample, "handler", 1)) == ParamTarget(Sample, "handler", 1)

    def test_empty_args(self):
        assert isinstance(classify_target(()), Unresolved)

    def test_non_callable_single_arg(self):
        target = classify_target((42,))
        assert isinstance(target, Unresolved)
        assert "int" in target.reason

    def test_missing_name(self):
        assert isinstance(classify_target((Sample, "")), Unresolved)
        assert isinstance(classify_target((Sample, None)), Unresolved)

    def test_invalid_index(self):
        assert isinstance(classify_target((Sample, "handler", -1)), Unresolved)
        assert isinstance(classify_target((Sample, "handler", True)), Unresolved)
        assert isinstance(classify_target((Sample, "handler", "0")), Unresolved)

    def test_too_many_args(self):
        assert isinstance(classify_target((Sample, "handler", 0, 1)), Unresolved)
