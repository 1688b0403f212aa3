from __future__ import annotations


class PostgenError(Exception):
    """Base error for all postgen operations."""


class ConfigError(PostgenError):
    """Invalid config file or global metadata file."""


class NameValidationError(PostgenError):
    def __init__(self, paths: list[str]):
        super().__init__(f"{len(paths)} file name(s) are not valid")
        self.paths = paths


class DuplicateIdentityError(PostgenError):
    def __init__(self, duplicates: dict[str, list[str]]):
        super().__init__(f"{len(duplicates)} name(s) are used by more than one file")
        self.duplicates = duplicates


class FrontMatterMissingError(PostgenError):
    def __init__(self) -> None:
        super().__init__("No front-matter detected")


class FrontMatterValidationError(PostgenError):
    def __init__(self, problems: list[str]):
        super().__init__("Front-matter validation failure\n" + "\n".join(problems))
        self.problems = problems


class RenderError(PostgenError):
    """Markdown could not be turned into HTML (bad link, failed highlight)."""


class DeletionError(PostgenError):
    def __init__(self, path: str, cause: OSError):
        super().__init__(f"Could not remove {path}: {cause}")
        self.path = path
        self.cause = cause


class BuildFailedError(PostgenError):
    """One or more sources or reused outputs failed; nothing was written."""

    def __init__(self, errors: list[tuple[str, Exception]]):
        super().__init__(f"{len(errors)} file(s) failed to process")
        self.errors = errors


class OutputRecordError(PostgenError):
    """A previously written output is not a post record and cannot be reused."""


class WriteError(PostgenError):
    def __init__(self, path: str, cause: OSError):
        super().__init__(f"Could not write {path}: {cause}")
        self.path = path
        self.cause = cause
