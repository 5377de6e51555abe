"""Invocation records and the request tags that carry them."""

from .arguments import ArgumentList
from .invocation import INVOCATION, InvocationRecord, invocation_of
from .operation import Operation
from .tags import TagKey, Tags, get_request_tag, request_tags, tag_request

__all__ = [
    "ArgumentList",
    "INVOCATION",
    "InvocationRecord",
    "Operation",
    "TagKey",
    "Tags",
    "get_request_tag",
    "invocation_of",
    "request_tags",
    "tag_request",
]
