"""Tests for strata.routing.layer — Layer, LayerMatch, handler classification."""

import functools

import pytest

from strata.app import App
from strata.errors import ConfigurationError
from strata.routing.layer import (
    HandlerKind,
    Layer,
    LayerMatch,
    classify,
    is_mountable,
    normalize_path,
    positional_arity,
)


def _noop() -> None:
    pass


def _normal(request, response, next):
    next()


def _error(error, request, response, next):
    next(error)


class TestLayerConstruction:
    def test_stores_handler(self) -> None:
        layer = Layer("/foo", _noop)
        assert layer.handler is _noop

    def test_frozen(self) -> None:
        layer = Layer("/foo", _noop)
        with pytest.raises(AttributeError):
            layer.path = "/bar"  # type: ignore[misc]

    def test_rejects_non_callable(self) -> None:
        with pytest.raises(ConfigurationError, match="must be callable"):
            Layer("/", "not a handler")

    def test_rejects_non_string_path(self) -> None:
        with pytest.raises(ConfigurationError, match="must be a string"):
            Layer(42, _noop)  # type: ignore[arg-type]

    def test_explicit_kind_wins_over_arity(self) -> None:
        layer = Layer("/", _normal, HandlerKind.ERROR)
        assert layer.is_error_handler is True

    def test_explicit_mount_requires_handle(self) -> None:
        with pytest.raises(ConfigurationError, match="handle"):
            Layer("/", _normal, HandlerKind.MOUNT)


class TestNormalizePath:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("/", "/"),
            ("", "/"),
            ("foo", "/foo"),
            ("/foo/", "/foo"),
            ("/foo/bar//", "/foo/bar"),
        ],
    )
    def test_normalize(self, raw: str, expected: str) -> None:
        assert normalize_path(raw) == expected

    def test_layer_path_is_normalized(self) -> None:
        assert Layer("foo/", _noop).path == "/foo"


class TestClassification:
    def test_three_params_is_normal(self) -> None:
        assert Layer("/", _normal).kind is HandlerKind.NORMAL

    def test_four_params_is_error(self) -> None:
        layer = Layer("/", _error)
        assert layer.kind is HandlerKind.ERROR
        assert layer.is_error_handler is True

    def test_fewer_params_is_normal(self) -> None:
        def two(request, response):
            pass

        assert classify(two) is HandlerKind.NORMAL
        assert classify(_noop) is HandlerKind.NORMAL

    def test_app_is_mount(self) -> None:
        layer = Layer("/api", App())
        assert layer.kind is HandlerKind.MOUNT
        assert layer.is_mount is True
        assert layer.is_error_handler is False

    def test_async_error_handler(self) -> None:
        async def on_error(error, request, response, next):
            pass

        assert classify(on_error) is HandlerKind.ERROR

    def test_callable_object_uses_call_signature(self) -> None:
        class Recover:
            def __call__(self, error, request, response, next):
                pass

        assert classify(Recover()) is HandlerKind.ERROR

    def test_partial_counts_remaining_params(self) -> None:
        def tagged(tag, error, request, response, next):
            pass

        assert positional_arity(functools.partial(tagged, "x")) == 4
        assert classify(functools.partial(tagged, "x")) is HandlerKind.ERROR

    def test_keyword_only_params_not_counted(self) -> None:
        def mw(request, response, next, *, extra=None):
            pass

        assert positional_arity(mw) == 3

    def test_non_callable_handle_attribute_is_not_a_mount(self) -> None:
        class Tracer:
            handle = "tracer"

            def __call__(self, request, response, next):
                next()

        assert is_mountable(Tracer()) is False
        assert classify(Tracer()) is HandlerKind.NORMAL

    def test_explicit_mount_rejects_non_callable_handle(self) -> None:
        class Tracer:
            handle = None

            def __call__(self, request, response, next):
                next()

        with pytest.raises(ConfigurationError, match="handle"):
            Layer("/", Tracer(), HandlerKind.MOUNT)

    def test_object_with_callable_handle_is_mount(self) -> None:
        class Gateway:
            def handle(self, request, response, done=None):
                pass

        assert is_mountable(Gateway()) is True
        assert classify(Gateway()) is HandlerKind.MOUNT

    def test_uninspectable_is_normal(self) -> None:
        # Some builtins have no retrievable signature
        assert classify(print) is HandlerKind.NORMAL


class TestMatch:
    @pytest.fixture
    def layer(self) -> Layer:
        return Layer("/foo", _noop)

    def test_no_match(self, layer: Layer) -> None:
        assert layer.match("/bar") is None

    def test_no_match_across_segment_boundary(self, layer: Layer) -> None:
        assert layer.match("/foobar") is None

    def test_shorter_path_does_not_match(self, layer: Layer) -> None:
        assert layer.match("/fo") is None
        assert layer.match("/") is None

    def test_exact_match(self, layer: Layer) -> None:
        match = layer.match("/foo")
        assert match == LayerMatch(path="/foo", remainder="/")

    def test_prefix_match(self, layer: Layer) -> None:
        match = layer.match("/foo/bar")
        assert match is not None
        assert match.path == "/foo"
        assert match.remainder == "/bar"

    def test_trailing_slash_matches(self, layer: Layer) -> None:
        match = layer.match("/foo/")
        assert match is not None
        assert match.remainder == "/"

    def test_case_sensitive(self, layer: Layer) -> None:
        assert layer.match("/FOO") is None

    def test_nested_mount_path(self) -> None:
        layer = Layer("/foo/a", _noop)
        assert layer.match("/foo") is None
        assert layer.match("/foo/b") is None
        assert layer.match("/foo/a/x").remainder == "/x"  # type: ignore[union-attr]

    def test_root_matches_everything(self) -> None:
        layer = Layer("/", _noop)
        for path in ("/", "/foo", "/foo/bar", "/foobar"):
            match = layer.match(path)
            assert match is not None
            assert match.path == "/"
            assert match.remainder == path

    def test_match_result_frozen(self, layer: Layer) -> None:
        match = layer.match("/foo")
        with pytest.raises(AttributeError):
            match.path = "/x"  # type: ignore[misc, union-attr]
