"""Integer math helpers for Chert contracts (see ``safe_uint``)."""

from .safe_uint import U8_MAX, U64_MAX, add, require_u64, sub

__all__ = ["U8_MAX", "U64_MAX", "add", "require_u64", "sub"]
