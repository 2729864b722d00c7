class AnalysisError(Exception):
    """Base exception for floor-plan analysis errors."""


class PassError(AnalysisError):
    """Raised when one analysis pass cannot get an answer from the model."""

    def __init__(self, pass_name: str, message: str) -> None:
        super().__init__(message)
        self.pass_name = pass_name


class AnalysisCancelledError(AnalysisError):
    """Raised when a batch is cancelled before a document finishes."""


class PromptLoadError(AnalysisError):
    """Raised when a bundled prompt template cannot be read."""
