"""Exception types shared by integrations, pipelines and the router."""


class MothershipError(Exception):
    """Base class for errors raised by this service."""


class ConfigurationError(MothershipError):
    """A required secret or setting is missing."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"{', '.join(missing)} not configured")


class UpstreamError(MothershipError):
    """A third-party API answered non-2xx or could not be reached."""

    def __init__(self, service: str, message: str, status_code: int | None = None):
        self.service = service
        self.status_code = status_code
        detail = f"{service} error"
        if status_code is not None:
            detail += f" ({status_code})"
        super().__init__(f"{detail}: {message}")


class ScraperRunError(UpstreamError):
    """The Apify actor run ended unsuccessfully or never finished."""

    def __init__(self, run_id: str, status: str):
        self.run_id = run_id
        self.status = status
        super().__init__("Apify", f"run {run_id} ended with status {status}")
