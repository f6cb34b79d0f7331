from typing import TYPE_CHECKING, Annotated, Any, TypeVar, Union, get_args, get_origin

T = TypeVar("T")
_ANNOTATED_MARKER_MIN_ARGS = 2


class InjectedMarker:
    """A marker used to indicate a field or parameter should be injected.

    Structured types carry it on the annotations of fields that the registry
    is allowed to set during ``Registry.inject``.
    """

    def __repr__(self) -> str:
        return "InjectedMarker()"


if TYPE_CHECKING:
    Injected = Union[T, T]  # noqa: UP007,PYI016
    """Mark a field or parameter for registry-driven injection.

    At runtime ``Injected[T]`` becomes ``Annotated[T, InjectedMarker()]``.

    Examples:
        .. code-block:: python

            @dataclass
            class Controller:
                writer: Injected[Writer]
                action: str = ""
    """

else:

    class Injected:
        """Mark a field or parameter for registry-driven injection.

        At runtime ``Injected[T]`` resolves to ``Annotated[T, InjectedMarker()]``.
        Only fields carrying this marker (or the dataclass metadata tag) are
        touched by ``Registry.inject``.

        Examples:
            .. code-block:: python

                @dataclass
                class Controller:
                    writer: Injected[Writer]
                    action: str = ""

        """

        def __class_getitem__(cls, item: T) -> Annotated[T, InjectedMarker]:
            if get_origin(item) is Annotated:
                args = get_args(item)
                inner = args[0]
                metadata = args[1:]
                return _build_annotated((inner, *metadata, InjectedMarker()))
            return _build_annotated((item, InjectedMarker()))


def is_injected_annotation(annotation: Any) -> bool:
    """Return True when annotation is Annotated[..., InjectedMarker()]."""
    if get_origin(annotation) is not Annotated:
        return False
    annotation_args = get_args(annotation)
    if len(annotation_args) < _ANNOTATED_MARKER_MIN_ARGS:
        return False
    metadata = annotation_args[1:]
    return any(isinstance(item, InjectedMarker) for item in metadata)


def strip_annotated(annotation: Any) -> Any:
    """Return the underlying type of an Annotated[...] annotation.

    Metadata never distinguishes two bindings, so every ``Annotated`` layer is
    dropped when an annotation is used as a registry key.
    """
    while get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    return annotation


def _build_annotated(params: tuple[object, ...]) -> Any:
    """Return Annotated[...] with a pre-built params tuple (Py 3.10+ compatible)."""
    try:
        return Annotated.__class_getitem__(params)  # type: ignore[attr-defined]
    except AttributeError:
        return Annotated.__getitem__(params)  # type: ignore[attr-defined]
