from __future__ import annotations

import inspect
import threading
import weakref
from collections.abc import Callable
from dataclasses import dataclass
from inspect import Parameter
from typing import TYPE_CHECKING, Any, get_type_hints

import typing_extensions

from fixturewire._internal.type_checks import is_runtime_class
from fixturewire.exceptions import FixtureProviderInferenceError

if TYPE_CHECKING:
    from fixturewire._internal.context import ResolutionContext

_MISSING_ANNOTATION: Any = object()
_IMPLICIT_FIRST_PARAMETER_NAMES = {"self", "cls"}
_SELF_ANNOTATION: Any = typing_extensions.Self


@dataclass(frozen=True, slots=True)
class InitializerArgument:
    """Represent one initializer parameter requested from the resolution context."""

    label: str
    """Parameter name, used as the override label."""

    annotation: Any
    """Requested type."""

    positional: bool
    """True for positional-only parameters, which cannot be passed by keyword."""


class InitializerArgumentsExtractor:
    """Extract the arguments an initializer requests from its signature and type hints.

    Results are cached per initializer because the same provider is usually
    invoked many times during a test session. The cache holds initializers
    weakly, so classes defined inside a test are not kept alive by it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._arguments_cache: weakref.WeakKeyDictionary[Any, tuple[InitializerArgument, ...]] = (
            weakref.WeakKeyDictionary()
        )

    def extract(self, initializer: Callable[..., Any]) -> tuple[InitializerArgument, ...]:
        """Return the arguments requested when calling ``initializer``.

        Args:
            initializer: Class, alternate constructor, or factory function.

        Raises:
            FixtureProviderInferenceError: If a required parameter has no
                resolvable type annotation, or the signature cannot be read.

        """
        try:
            cached = self._arguments_cache.get(initializer)
        except TypeError:
            # Not weak-referenceable, such as builtin functions.
            return self._extract_arguments(initializer)
        if cached is not None:
            return cached

        arguments = self._extract_arguments(initializer)
        with self._lock:
            self._arguments_cache[initializer] = arguments
        return arguments

    def _extract_arguments(self, initializer: Callable[..., Any]) -> tuple[InitializerArgument, ...]:
        name = initializer_name(initializer)
        try:
            parameters = tuple(inspect.signature(initializer).parameters.values())
        except (TypeError, ValueError) as error:
            msg = f"Unable to read the signature of initializer '{name}'."
            raise FixtureProviderInferenceError(msg) from error

        if parameters and parameters[0].name in _IMPLICIT_FIRST_PARAMETER_NAMES:
            parameters = parameters[1:]

        annotations, annotation_error = self._resolved_type_hints(initializer)
        arguments: list[InitializerArgument] = []
        for parameter in parameters:
            if parameter.kind in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD):
                continue
            annotation = self._resolve_parameter_annotation(
                parameter=parameter,
                annotations=annotations,
                annotation_error=annotation_error,
                initializer_name=name,
            )
            if annotation is _MISSING_ANNOTATION:
                continue
            arguments.append(
                InitializerArgument(
                    label=parameter.name,
                    annotation=annotation,
                    positional=parameter.kind is Parameter.POSITIONAL_ONLY,
                ),
            )
        return tuple(arguments)

    def _resolve_parameter_annotation(
        self,
        *,
        parameter: Parameter,
        annotations: dict[str, Any],
        annotation_error: Exception | None,
        initializer_name: str,
    ) -> Any:
        annotation = annotations.get(parameter.name, _MISSING_ANNOTATION)
        if annotation is not _MISSING_ANNOTATION:
            return annotation

        raw_annotation = parameter.annotation
        if raw_annotation is not Parameter.empty and not isinstance(raw_annotation, str):
            return raw_annotation

        if parameter.default is not Parameter.empty:
            return _MISSING_ANNOTATION

        error_message = (
            f"Unable to infer the type of required parameter '{parameter.name}' "
            f"of initializer '{initializer_name}'. Add a type annotation."
        )
        if annotation_error is None:
            raise FixtureProviderInferenceError(error_message)
        msg = f"{error_message} Original annotation error: {annotation_error}"
        raise FixtureProviderInferenceError(msg) from annotation_error

    def _resolved_type_hints(
        self,
        initializer: Callable[..., Any],
    ) -> tuple[dict[str, Any], Exception | None]:
        annotations: dict[str, Any] = {}
        annotation_error: Exception | None = None

        try:
            annotations = get_type_hints(initializer, include_extras=True)
        except (AttributeError, NameError, TypeError) as error:
            annotation_error = error

        if inspect.isclass(initializer):
            for callable_member_name in ("__new__", "__init__"):
                callable_member = getattr(initializer, callable_member_name)
                try:
                    member_annotations = get_type_hints(callable_member, include_extras=True)
                except (AttributeError, NameError, TypeError) as error:
                    if annotation_error is None:
                        annotation_error = error
                    continue
                for parameter_name, parameter_annotation in member_annotations.items():
                    annotations.setdefault(parameter_name, parameter_annotation)

        return annotations, annotation_error


_ARGUMENTS_EXTRACTOR = InitializerArgumentsExtractor()


def init_fixture(values: ResolutionContext, initializer: Callable[..., Any]) -> Any:
    """Call an initializer with every argument requested from the resolution context.

    Each parameter is requested with its annotation as the type and its name as
    the override label. This is what ``@provide_fixture`` and
    ``Fixture.register_init`` generate, and it can be used directly inside a
    hand-written ``provide_fixture``:

    .. code-block:: python

        class Office:
            @classmethod
            def provide_fixture(cls, values: ResolutionContext) -> Office:
                return init_fixture(values, cls.create)

    Args:
        values: Resolution context passed to the provider.
        initializer: Class, alternate constructor, or factory function to call.

    Raises:
        FixtureProviderInferenceError: If an argument type cannot be inferred.

    """
    args: list[Any] = []
    kwargs: dict[str, Any] = {}
    for argument in _ARGUMENTS_EXTRACTOR.extract(initializer):
        value = values.get(argument.annotation, argument.label)
        if argument.positional:
            args.append(value)
        else:
            kwargs[argument.label] = value
    return initializer(*args, **kwargs)


def provided_type_of(initializer: Callable[..., Any]) -> Any:
    """Infer the type an initializer provides.

    Classes provide themselves. Callables provide their return annotation, and
    bound classmethods annotated to return ``Self`` provide their owning class.

    Args:
        initializer: Class, alternate constructor, or factory function.

    Raises:
        FixtureProviderInferenceError: If the initializer has no usable return annotation.

    """
    if is_runtime_class(initializer):
        return initializer

    name = initializer_name(initializer)
    try:
        return_annotation = get_type_hints(initializer, include_extras=True).get(
            "return",
            _MISSING_ANNOTATION,
        )
    except (AttributeError, NameError, TypeError) as error:
        msg = f"Unable to read the return annotation of initializer '{name}': {error}"
        raise FixtureProviderInferenceError(msg) from error

    if return_annotation is _SELF_ANNOTATION:
        owner = getattr(initializer, "__self__", None)
        if is_runtime_class(owner):
            return owner
        return_annotation = _MISSING_ANNOTATION

    if return_annotation is _MISSING_ANNOTATION or return_annotation is type(None):
        msg = (
            f"Unable to infer the type provided by initializer '{name}'. "
            "Add a return annotation or register it with 'Fixture.register_init'."
        )
        raise FixtureProviderInferenceError(msg)
    return return_annotation


def initializer_name(initializer: Callable[..., Any]) -> str:
    """Return a readable name for an initializer."""
    return getattr(initializer, "__qualname__", repr(initializer))
