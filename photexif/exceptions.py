# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Exception classes for photexif

Malformed image data never raises out of the extractor; it is reported
through the diagnostics attached to the result. The exceptions here cover
programming errors at the API boundary and the internal signalling between
the TIFF header reader and its caller.

Copyright 2025 DNAi inc.
"""


class PhotexifError(Exception):
    """
    Base exception for all photexif errors.

    All photexif exceptions inherit from this class, allowing
    catch-all error handling for any photexif-related errors.
    """
    def __init__(self, message: str = ""):
        """
        Initialize the exception with an optional error message.

        Args:
            message: Descriptive error message explaining what went wrong
        """
        self.message = message
        super().__init__(message)


class InvalidInputError(PhotexifError, TypeError):
    """
    Raised when the extractor is called with an argument of the wrong type.

    This exception is raised when:
    - The file data is not bytes, bytearray or memoryview
    - The display name is not a string
    """
    pass


class MetadataReadError(PhotexifError):
    """
    Raised internally when a metadata structure cannot be read.

    Never propagates past ``extract_metadata``; the public parsing
    functions convert it into a diagnostic and a ``None`` result.
    """
    pass


class MalformedHeaderError(MetadataReadError):
    """
    Raised when a TIFF header is unusable.

    This exception is raised when:
    - The payload is shorter than the 8-byte TIFF header
    - The byte order marker is neither ``II`` nor ``MM``
    - The magic number is not 42
    - The IFD0 offset is zero or points outside the payload
    """
    pass
