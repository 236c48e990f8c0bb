"""Visitor base for syntax tree traversal."""

from .base import NodeVisitor

__all__ = ["NodeVisitor"]
