# This file resolves the route template a request was matched against, including the router prefix.
# It exists so call logs and metric labels name `/api/v1/customers/{customer_id:int}` rather than a raw URL.
# Some FastAPI releases copy included routes with the prefix baked into `route.path`; newer ones keep the
# router's own prefix-less route, so the mounted prefix is recovered from the part of the path it did not match.

from __future__ import annotations

from fastapi import Request


def route_template(request: Request) -> str | None:
    """Full template of the matched route, or None when no route matched."""

    route = request.scope.get("route")
    template = getattr(route, "path", None)
    path_regex = getattr(route, "path_regex", None)
    if template is None or path_regex is None:
        return None

    path = request.scope.get("path", "")
    if path_regex.match(path):
        return template

    cuts = [index for index, char in enumerate(path) if char == "/"] + [len(path)]
    for cut in cuts:
        if path_regex.match(path[cut:]):
            return f"{path[:cut]}{template}"
    return template
