"""Error taxonomy for dcrun workflows."""


class DcrunError(Exception):
    """Base class for all workflow failures.

    Carries enough context (project, step, exit code) to diagnose a failed
    workflow by hand.
    """

    def __init__(
        self,
        message: str,
        project: str | None = None,
        step: str | None = None,
        exit_code: int | None = None,
    ) -> None:
        """Initialize error.

        Args:
            message: Human readable description.
            project: Compose project name the workflow operated on.
            step: Workflow step that failed.
            exit_code: Exit or status code of the underlying command.
        """
        super().__init__(message)
        self.message = message
        self.project = project
        self.step = step
        self.exit_code = exit_code

    def __str__(self) -> str:
        context = []
        if self.project is not None:
            context.append(f"project={self.project}")
        if self.step is not None:
            context.append(f"step={self.step}")
        if self.exit_code is not None:
            context.append(f"exit_code={self.exit_code}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class ConfigNotFoundError(DcrunError):
    """Raised when the devcontainer descriptor does not exist."""


class TransferError(DcrunError):
    """Raised when copying an artifact fails."""


class BuildVerificationFailedError(DcrunError):
    """Raised when no container can be resolved after a build."""


class StartFailedError(DcrunError):
    """Raised when the container is absent or not running after bring-up."""


class MissingWorkspaceFolderError(DcrunError):
    """Raised when the descriptor has no workspace folder value."""


class InitializationScriptError(DcrunError):
    """Raised when the volume initialization script exits non-zero."""


class LifecycleCommandError(DcrunError):
    """Raised when a trusted lifecycle command exits non-zero."""
