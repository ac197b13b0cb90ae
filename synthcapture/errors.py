class ConfigurationMissingError(RuntimeError):
    """
    Raised when a capture step cannot run because a collaborator or input is missing.

    Examples are a missing renderer or screenshot service, a subject that was never
    spawned, zero viewpoints, or a renderer whose resolution differs from the
    capture resolution. The orchestrator catches it and skips the affected subject.
    """
