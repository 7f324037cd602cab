# ABOUTME: Error taxonomy for article downloads, image downloads and CLI validation.
# ABOUTME: Article-level errors carry the link they belong to for the final summary.


class PaperoniError(Exception):
    """An error that aborts a single article (or a merged export)."""

    kind = "PaperoniError"

    def __init__(self, message: str, article_source: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.article_source = article_source

    def set_article_source(self, article_source: str) -> None:
        self.article_source = article_source

    def __str__(self) -> str:
        return f"[{self.kind}]: {self.message}"


class EpubError(PaperoniError):
    kind = "EpubError"


class HTTPError(PaperoniError):
    kind = "HTTPError"


class StorageError(PaperoniError):
    kind = "IOError"


class UTF8Error(PaperoniError):
    kind = "UTF8Error"


class ReadabilityError(PaperoniError):
    kind = "ReadabilityError"


class ImgError(Exception):
    """A single image failed to download. Recoverable: the article is still written."""

    def __init__(self, url: str, error: PaperoniError) -> None:
        super().__init__(str(error))
        self.url = url
        self.error = error

    @property
    def kind(self) -> str:
        return self.error.kind


class CliError(Exception):
    """Invalid command-line configuration. Fatal at startup."""
