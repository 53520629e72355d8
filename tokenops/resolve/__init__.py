from .resolver import AccountRole, ReferenceResolver

__all__ = ["AccountRole", "ReferenceResolver"]
