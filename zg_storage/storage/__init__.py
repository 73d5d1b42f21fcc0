from .filesystem import FileSystemStorage  # noqa: F401
