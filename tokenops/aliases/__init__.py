from .registry import ALIAS_NAMESPACE, AliasRegistry

__all__ = ["ALIAS_NAMESPACE", "AliasRegistry"]
