"""formfields exception hierarchy.

Shared by the path resolver, the field handles, and the template
integration so every module raises and catches the same types.
"""


class FormFieldsError(Exception):
    """Base for all formfields-specific errors."""


class ConfigurationError(FormFieldsError):
    """Raised when a field is wired up incorrectly.

    These are template or handler mistakes, never user input errors,
    and are raised as soon as the field or scope handle is created.
    """


class PathError(ConfigurationError):
    """Raised when a field name is missing or malformed (``"user..name"``)."""


class UnresolvedRootError(ConfigurationError):
    """Raised when the first path token names nothing.

    Neither an explicit root nor a stash entry exists for it.

    Attributes:
        name: The full field name being resolved.
        root: The first token that could not be found.
    """

    def __init__(self, name: str, root: str) -> None:
        self.name = name
        self.root = root
        super().__init__(f"Cannot resolve {name!r}: nothing named {root!r} in the stash")


class AccessorError(ConfigurationError):
    """Raised when a token names a callable that needs arguments.

    Such an accessor cannot be resolved without guessing its arguments.
    """
