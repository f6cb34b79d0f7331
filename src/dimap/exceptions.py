class DimapError(Exception):
    """Represent a base class for all dimap-specific failures.

    Catch this type when you want to handle any dimap error path without
    matching each concrete exception class individually. Every dimap error is a
    usage or configuration mistake; a type that cannot be found is never an
    error, it resolves to a default value instead.
    """


class IncompatibleBindingError(DimapError):
    """Signal a registration whose source cannot satisfy its target type.

    Raised by ``Registry.register_as`` when the given value or type is not
    convertible to the requested target, for example a class that does not
    implement every member of a ``Protocol``. No binding is installed when this
    error is raised.

    Typical fixes include implementing the missing members on the source class,
    registering against a type the source actually subclasses, or using
    ``Registry.register`` to bind the value under its own type.
    """

    def __init__(self, source: object, target: object) -> None:
        self.source = source
        self.target = target
        super().__init__(f"{source!r} cannot be converted to {target!r}")


class NotAnInterfaceError(DimapError):
    """Signal a non-interface marker passed where an interface is required.

    Raised by ``interface_of`` when the marker is neither a ``typing.Protocol``
    class nor an abstract base class, after unwrapping ``Ref[...]`` and
    ``Annotated[...]`` layers.

    Typical fix is passing the protocol or ABC itself, for example
    ``interface_of(Writer)`` instead of ``interface_of(ResponseWriter)``.
    """

    def __init__(self, marker: object) -> None:
        self.marker = marker
        super().__init__(
            f"{marker!r} is not an interface type, pass a Protocol or an abstract base class",
        )


class InvalidCallableError(DimapError):
    """Signal a value that cannot be called with injected arguments.

    Raised by ``Registry.call`` when the value is not callable or its signature
    and annotations cannot be inspected, and by ``Registry.register_provider``
    when the factory is not callable.

    Typical fixes include passing the function object itself rather than its
    result, and making sure forward references in annotations are importable
    from the function's module.
    """

    def __init__(self, obj: object, reason: str | None = None) -> None:
        self.obj = obj
        message = f"{obj!r} is not a valid callable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class FieldExtractionError(DimapError):
    """Signal a structured type whose field annotations cannot be resolved.

    Raised by ``Registry.make`` and ``Registry.inject`` when building or
    injecting a structured type whose annotations reference names that cannot
    be evaluated, for example a string annotation naming a class defined
    inside a function body of a module using ``from __future__ import
    annotations``.

    Typical fixes include moving the referenced class to module level, importing
    it at runtime instead of under ``TYPE_CHECKING``, or correcting a misspelled
    forward reference.
    """

    def __init__(self, cls: type, error: Exception) -> None:
        self.cls = cls
        self.error = error
        super().__init__(f"Cannot resolve field annotations of {cls!r}: {error}")
