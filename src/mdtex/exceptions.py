#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/exceptions.py
"""Custom exceptions for the mdtex library.

This module defines specialized exception classes for the error conditions
that can occur while converting markdown to LaTeX. Recoverable problems
(ambiguous fragments, unsupported constructs, malformed math) are logged
and never raised; everything below aborts the conversion.

Exception Hierarchy
-------------------
- MdtexError (base exception)

  - ValidationError (parameter/option validation)
    - InvalidOptionsError (wrong options class for a component)

  - FileError (file access and I/O)
    - FileNotFoundError (file doesn't exist)
    - FileAccessError (permissions, unreadable input)

  - ParsingError (markdown parsing failures)

  - RenderingError (LaTeX generation failures)
    - OutputWriteError (sink write failures)
    - MalformedEventStreamError (broken Start/End pairing)
    - ReplacementConsistencyError (math span table out of sync)

  - CompilationError (LaTeX engine failures)

  - SecurityError (security violations)
    - NetworkSecurityError (URL validation, network violations)

  - DependencyError (missing packages or executables)

"""

from typing import Any


class MdtexError(Exception):
    """Base exception class for all mdtex-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(MdtexError):
    """Exception raised for invalid input parameters or options.

    Parameters
    ----------
    message : str
        Description of the validation error
    parameter_name : str, optional
        Name of the invalid parameter
    parameter_value : any, optional
        The invalid value that was provided
    original_error : Exception, optional
        The original exception that caused this error

    Attributes
    ----------
    parameter_name : str or None
        The name of the problematic parameter
    parameter_value : any
        The value that caused the error

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the validation error with parameter details."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class InvalidOptionsError(ValidationError):
    """Exception raised when an incorrect options class is provided.

    Parameters
    ----------
    converter_name : str
        Name of the component that received invalid options
    expected_type : type
        The expected options class type
    received_type : type
        The actual options class type that was received
    message : str, optional
        Custom error message. If not provided, generates a helpful message
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        converter_name: str,
        expected_type: type,
        received_type: type,
        message: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the invalid options error."""
        if message is None:
            message = (
                f"{converter_name} expected options of type '{expected_type.__name__}' "
                f"but received '{received_type.__name__}'."
            )
        super().__init__(
            message, parameter_name="options", parameter_value=received_type, original_error=original_error
        )
        self.converter_name = converter_name
        self.expected_type = expected_type
        self.received_type = received_type


class FileError(MdtexError):
    """Base exception for file access and I/O errors.

    Parameters
    ----------
    message : str
        Description of the file error
    file_path : str, optional
        Path to the problematic file
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, message: str, file_path: str | None = None, original_error: Exception | None = None):
        """Initialize the file error with path and message."""
        super().__init__(message, original_error=original_error)
        self.file_path = file_path


class FileNotFoundError(FileError):
    """Exception raised when an input file cannot be found."""

    def __init__(self, file_path: str, message: str | None = None, original_error: Exception | None = None):
        """Initialize the file not found error."""
        if message is None:
            message = f"File not found: {file_path}"
        super().__init__(message, file_path=file_path, original_error=original_error)


class FileAccessError(FileError):
    """Exception raised when a file exists but cannot be read."""

    def __init__(self, file_path: str, message: str | None = None, original_error: Exception | None = None):
        """Initialize the file access error."""
        if message is None:
            message = f"Cannot access file: {file_path}"
        super().__init__(message, file_path=file_path, original_error=original_error)


class ParsingError(MdtexError):
    """Exception raised when markdown parsing fails.

    Parameters
    ----------
    message : str
        Description of the parsing failure
    parsing_stage : str, optional
        The stage of parsing where the error occurred
    original_error : Exception, optional
        The underlying exception that caused the parsing failure

    """

    def __init__(self, message: str, parsing_stage: str | None = None, original_error: Exception | None = None):
        """Initialize the parsing error."""
        super().__init__(message, original_error)
        self.parsing_stage = parsing_stage


class RenderingError(MdtexError):
    """Exception raised when LaTeX generation fails.

    Parameters
    ----------
    message : str
        Description of the rendering failure
    rendering_stage : str, optional
        The stage of rendering where the error occurred
    original_error : Exception, optional
        The underlying exception that caused the rendering failure

    Attributes
    ----------
    rendering_stage : str or None
        Where in the rendering process the error occurred

    """

    def __init__(self, message: str, rendering_stage: str | None = None, original_error: Exception | None = None):
        """Initialize the rendering error."""
        super().__init__(message, original_error)
        self.rendering_stage = rendering_stage


class OutputWriteError(RenderingError):
    """Exception raised when writing to the output sink fails.

    Parameters
    ----------
    file_path : str, optional
        Path of the output file, or None for in-memory and stream sinks
    message : str, optional
        Custom error message. If not provided, uses default message
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self, file_path: str | None = None, message: str | None = None, original_error: Exception | None = None
    ):
        """Initialize the output write error."""
        if message is None:
            message = f"I/O error writing output: {file_path}" if file_path else "I/O error writing output"
        super().__init__(message, rendering_stage="output_write", original_error=original_error)
        self.file_path = file_path


class MalformedEventStreamError(RenderingError):
    """Exception raised when the event stream violates Start/End pairing.

    Parameters
    ----------
    message : str
        Description of the malformed sequence
    event : Any, optional
        The offending event

    """

    def __init__(self, message: str, event: Any = None):
        """Initialize the malformed stream error."""
        super().__init__(message, rendering_stage="event_stream")
        self.event = event


class ReplacementConsistencyError(RenderingError):
    """Exception raised when the math span table disagrees with a fragment.

    This indicates an internal inconsistency between the recorded
    replacement offsets and the source range reported for a fragment.

    Parameters
    ----------
    message : str
        Description of the mismatch
    position : int, optional
        Offset of the recorded replacement that could not be restored

    """

    def __init__(self, message: str, position: int | None = None):
        """Initialize the consistency error."""
        super().__init__(message, rendering_stage="un_replace")
        self.position = position


class CompilationError(MdtexError):
    """Exception raised when a LaTeX engine fails to produce a PDF.

    Parameters
    ----------
    message : str
        Description of the failure
    engine : str, optional
        Name of the LaTeX engine that was run
    log : str, optional
        Tail of the engine's log output
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str,
        engine: str | None = None,
        log: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the compilation error."""
        super().__init__(message, original_error)
        self.engine = engine
        self.log = log


class SecurityError(MdtexError):
    """Base exception for security violations."""


class NetworkSecurityError(SecurityError):
    """Exception raised when a network request is refused or fails.

    This includes invalid URLs, disallowed schemes, oversize responses
    and unexpected content types.

    """


class DependencyError(MdtexError):
    """Exception raised when required dependencies are not available.

    Parameters
    ----------
    converter_name : str
        Name of the feature requiring dependencies
    missing_packages : list[tuple[str, str]]
        List of (package_name, version_spec) tuples for missing packages
    install_command : str, optional
        Suggested command to resolve the issue
    message : str, optional
        Custom error message. If not provided, generates a helpful message
    original_import_error : ImportError, optional
        The import error that triggered this exception

    """

    def __init__(
        self,
        converter_name: str,
        missing_packages: list[tuple[str, str]],
        install_command: str = "",
        message: str | None = None,
        original_import_error: ImportError | None = None,
    ):
        """Initialize the dependency error with package details."""
        self.original_import_error = original_import_error
        if message is None:
            pkg_list = ", ".join(f"'{name}{spec}'" if spec else f"'{name}'" for name, spec in missing_packages)
            message = f"{converter_name} requires the following packages: {pkg_list}"
            if install_command:
                message += f"\nInstall with: {install_command}"
            elif missing_packages:
                packages_str = " ".join(f'"{name}{spec}"' if spec else name for name, spec in missing_packages)
                message += f"\nInstall with: pip install --upgrade {packages_str}"

        super().__init__(message)
        self.converter_name = converter_name
        self.missing_packages = missing_packages
        self.install_command = install_command


__all__ = [
    "MdtexError",
    "ValidationError",
    "InvalidOptionsError",
    "FileError",
    "FileNotFoundError",
    "FileAccessError",
    "ParsingError",
    "RenderingError",
    "OutputWriteError",
    "MalformedEventStreamError",
    "ReplacementConsistencyError",
    "CompilationError",
    "SecurityError",
    "NetworkSecurityError",
    "DependencyError",
]
