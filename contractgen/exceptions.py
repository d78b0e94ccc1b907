"""Custom exceptions for contractgen.

This module defines the hierarchy of exceptions used throughout contractgen
to report schema, generation, configuration and output failures with
actionable messages.
"""

from typing import Any


class ContractGenError(Exception):
    """Base exception for all contractgen errors.

    All exceptions raised by contractgen inherit from this class, making it
    easy to catch every contractgen failure with a single except clause.

    Example:
        try:
            codegen.generate()
        except ContractGenError as e:
            print(f"contractgen error: {e}")
    """

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class SchemaError(ContractGenError):
    """Base exception for schema-related errors."""

    pass


class SchemaLoadError(SchemaError):
    """Failed to load a schema document from a source.

    Attributes:
        source: The source path or URL that failed to load.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, source: str, cause: Exception | None = None):
        self.source = source
        self.cause = cause
        message = f"Failed to load schema from '{source}'"
        if cause:
            message += f': {cause}'
        super().__init__(message)


class UnresolvedReferenceError(SchemaError):
    """A $ref pointer does not resolve inside the document.

    This is fatal for the whole run: a type cannot be synthesized without
    its target.

    Attributes:
        reference: The pointer that could not be resolved.
        reason: Explanation of why the pointer could not be resolved.
    """

    def __init__(self, reference: str, reason: str | None = None):
        self.reference = reference
        self.reason = reason
        message = f"Failed to resolve reference '{reference}'"
        if reason:
            message += f': {reason}'
        super().__init__(message)


class MalformedReferenceError(SchemaError):
    """A $ref pointer has no extractable terminal name.

    Attributes:
        reference: The malformed pointer.
    """

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(f"Malformed reference '{reference}': no terminal name")


class CodeGenerationError(ContractGenError):
    """Error during code generation.

    Attributes:
        context: Additional context about what was being generated.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self, message: str, context: str | None = None, cause: Exception | None = None
    ):
        self.context = context
        self.cause = cause
        full_message = message
        if context:
            full_message = f'{message} (while generating {context})'
        if cause:
            full_message += f': {cause}'
        super().__init__(full_message)


class InvalidEnumValueError(CodeGenerationError):
    """An enumeration contains a value that cannot become an enum member.

    TypeScript enums have no member-level null, so ``None`` values are
    rejected. The declaration name and offending index are kept so the
    source schema can be fixed.

    Attributes:
        declaration_name: The enum being generated.
        index: Position of the offending value, or None for an empty enum.
        value: The offending value.
    """

    def __init__(self, declaration_name: str, index: int | None, value: Any = None):
        self.declaration_name = declaration_name
        self.index = index
        self.value = value
        if index is None:
            message = f"Enum '{declaration_name}' has no values"
        else:
            message = (
                f"Invalid value {value!r} at index {index} of enum "
                f"'{declaration_name}': null values are not allowed in enums"
            )
        super().__init__(message, context=declaration_name)


class ConfigurationError(ContractGenError):
    """Error in configuration.

    Attributes:
        config_path: The path to the configuration file, if applicable.
        field: The specific configuration field that is invalid.
    """

    def __init__(
        self, message: str, config_path: str | None = None, field: str | None = None
    ):
        self.config_path = config_path
        self.field = field
        full_message = message
        if config_path:
            full_message = f"{message} in '{config_path}'"
        if field:
            full_message += f' (field: {field})'
        super().__init__(full_message)


class OutputError(ContractGenError):
    """Error writing generated output.

    Attributes:
        output_path: The path where output was being written.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, output_path: str, cause: Exception | None = None):
        self.output_path = output_path
        self.cause = cause
        message = f"Failed to write output to '{output_path}'"
        if cause:
            message += f': {cause}'
        super().__init__(message)


class NamingCollisionWarning(UserWarning):
    """A type-name token could not be matched to a generated declaration.

    Never raised. It is logged and collected on the emitter: dependency
    inference is best effort, so the file is emitted without the import.
    """

    def __init__(self, declaration_name: str, token: str):
        self.declaration_name = declaration_name
        self.token = token
        super().__init__(
            f"Could not resolve type '{token}' referenced by '{declaration_name}'; "
            'no import emitted'
        )
