class PageDocError(Exception):
    """Base class for failures of a diagnosis run."""


class NavigationError(PageDocError):
    """The target page could not be loaded at all."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Could not load {url}: {reason}")
