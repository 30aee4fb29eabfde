"""Namespace metadata naming one middleware and one resolver, not sequences."""

from perch import NamespaceMeta


def audit(request, next):
    return f"audited({next(request)})"


def shelf_resolver(name, tag, request):
    return "top" if name == "shelf" else None


__perch__ = NamespaceMeta(middleware=audit, arg_resolvers=shelf_resolver)


def index(shelf):
    return shelf
