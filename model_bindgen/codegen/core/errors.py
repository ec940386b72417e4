"""Errors raised while generating a binding."""


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    pass


class VersionNotFound(GeneratorError):
    """The requested model version does not exist, or the model has none."""

    pass


class SchemaNotFound(GeneratorError):
    """The schema document has no usable ``Input`` schema."""

    pass


class UnresolvedReference(GeneratorError):
    """A ``$ref`` points outside of, or nowhere in, the schema document."""

    def __init__(self, pointer: str):
        self.pointer = pointer
        super().__init__(f"Unresolved schema reference: {pointer}")


class NameCollision(GeneratorError):
    """Several schema properties map to the same Python identifier."""

    def __init__(self, collisions: dict[str, list[str]], scope: str = "Input"):
        self.collisions = collisions
        self.scope = scope
        details = "; ".join(
            f"{identifier!r} <- {', '.join(repr(name) for name in names)}"
            for identifier, names in collisions.items()
        )
        super().__init__(f"Field name collision in {scope}: {details}")


class GenerationCancelled(GeneratorError):
    """Generation was cancelled before any output was produced."""

    pass
