"""Domain errors raised by the prompt library."""


class PromptToolsError(Exception):
    """Base class for prompt library errors."""


class NotFoundError(PromptToolsError):
    """A prompt or version expected to exist is missing."""

    def __init__(self, resource: str, resource_id) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found: {resource_id}")


class VersionConflictError(PromptToolsError):
    """A version string already exists for the prompt."""

    def __init__(self, prompt_id, version: str) -> None:
        self.prompt_id = prompt_id
        self.version = version
        super().__init__(f"version {version} already exists for prompt {prompt_id}")


class ImportFormatError(PromptToolsError):
    """An import document does not have the expected shape."""
