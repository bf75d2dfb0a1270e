"""
Typed Exception Hierarchy for the Ledger Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the renderer need to tell "the output stream broke" apart from
"the ledger holds something this renderer cannot express" without parsing
message strings. Every error therefore:

  1. Has a TYPED exception class (catch by type, not message)
  2. Has a CODE attribute (machine-readable, log-safe)
  3. Carries structured DATA as attributes

Example:
    try:
        renderer.render(ledger, sink)
    except UnsupportedDirectiveError as e:
        log.warning("cannot render %s", e.kind)
    except RenderIoError as e:
        log.error("sink failed: %s", e.cause_type)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    LedgerKernelError (base)
    |
    +-- RenderError
    |   +-- RenderIoError
    |   +-- UnsupportedDirectiveError
    |
    +-- DocumentError
        +-- InvalidDocumentError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                   | When Raised
-----------|------------------------|------------------------------------------
Render     | RENDER_IO_ERROR        | The output sink rejected a write
           | UNSUPPORTED_DIRECTIVE  | Ledger contains the Unsupported sentinel
-----------|------------------------|------------------------------------------
Document   | INVALID_DOCUMENT       | Input document is structurally malformed

Both render errors are terminal for the current render call. Bytes already
written to the sink are not rolled back.
"""


class LedgerKernelError(Exception):
    """
    Base exception for all ledger kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "LEDGER_KERNEL_ERROR"


# Render-related exceptions


class RenderError(LedgerKernelError):
    """Base exception for rendering errors."""

    code: str = "RENDER_ERROR"


class RenderIoError(RenderError):
    """The output sink rejected a write."""

    code: str = "RENDER_IO_ERROR"

    def __init__(self, cause: BaseException):
        self.cause_type = type(cause).__name__
        super().__init__(f"An I/O error occurred while rendering: {cause}")


class UnsupportedDirectiveError(RenderError):
    """The ledger contains a directive the renderer has no rule for."""

    code: str = "UNSUPPORTED_DIRECTIVE"

    def __init__(self, kind: str | None = None):
        self.kind = kind
        msg = "Could not render unsupported directive"
        if kind:
            msg += f": {kind}"
        super().__init__(msg)


# Document-related exceptions


class DocumentError(LedgerKernelError):
    """Base exception for input document errors."""

    code: str = "DOCUMENT_ERROR"


class InvalidDocumentError(DocumentError):
    """An input document record is missing a field or holds a bad value."""

    code: str = "INVALID_DOCUMENT"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid document at {path}: {reason}")
