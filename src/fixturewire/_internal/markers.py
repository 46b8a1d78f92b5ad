from typing import TYPE_CHECKING, Annotated, Any, TypeVar, Union, get_args, get_origin

T = TypeVar("T")
_ANNOTATED_MARKER_MIN_ARGS = 2


class FixturedMarker:
    """Marker used to indicate a test parameter should be resolved from a ``Fixture``.

    Used to identify parameters that need to be removed from test function
    signatures before pytest matches parameter names against fixtures.
    """


if TYPE_CHECKING:
    Fixtured = Union[T, T]  # noqa: UP007,PYI016
    """Mark a test parameter for resolution from the plugin-managed ``Fixture``.

    At runtime ``Fixtured[T]`` becomes ``Annotated[T, FixturedMarker()]``.

    Examples:
        .. code-block:: python

            def test_user_name(user: Fixtured[User]) -> None:
                assert user.name
    """

else:

    class Fixtured:
        """Mark a test parameter for resolution from the plugin-managed ``Fixture``.

        At runtime ``Fixtured[T]`` resolves to ``Annotated[T, FixturedMarker()]``.

        Examples:
            .. code-block:: python

                def test_user_name(user: Fixtured[User]) -> None:
                    assert user.name

        """

        def __class_getitem__(cls, item: T) -> Annotated[T, FixturedMarker]:
            if get_origin(item) is Annotated:
                args = get_args(item)
                inner = args[0]
                metadata = args[1:]
                return build_annotated_key((inner, *metadata, FixturedMarker()))
            return build_annotated_key((item, FixturedMarker()))


def is_fixtured_annotation(annotation: Any) -> bool:
    """Return True when annotation is Annotated[..., FixturedMarker()]."""
    if get_origin(annotation) is not Annotated:
        return False
    annotation_args = get_args(annotation)
    if len(annotation_args) < _ANNOTATED_MARKER_MIN_ARGS:
        return False
    metadata = annotation_args[1:]
    return any(isinstance(item, FixturedMarker) for item in metadata)


def strip_fixtured_annotation(annotation: Any) -> Any:
    """Strip Fixtured marker while preserving other Annotated metadata."""
    if not is_fixtured_annotation(annotation):
        return annotation

    annotation_args = get_args(annotation)
    parameter_type = annotation_args[0]
    metadata = annotation_args[1:]
    filtered_metadata = tuple(item for item in metadata if not isinstance(item, FixturedMarker))
    if not filtered_metadata:
        return parameter_type
    return build_annotated_key((parameter_type, *filtered_metadata))


def strip_annotated(annotation: Any) -> Any:
    """Return the base type of ``Annotated[T, ...]``, or the annotation unchanged."""
    if get_origin(annotation) is not Annotated:
        return annotation
    return get_args(annotation)[0]


def build_annotated_key(params: tuple[object, ...]) -> Any:
    """Return Annotated[...] with a pre-built params tuple (Py 3.10+ compatible)."""
    try:
        return Annotated.__class_getitem__(params)  # type: ignore[attr-defined]
    except AttributeError:
        return Annotated.__getitem__(params)  # type: ignore[attr-defined]
