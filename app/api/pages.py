"""
Dashboard pages.

Each catalog route and each public route is served as a small page
descriptor; the route guard middleware has already vetted the request.
"""

from __future__ import annotations

from fastapi import APIRouter

from painel_shared.schemas.common import PUBLIC_ROUTES, ROUTE_CATALOG, RouteInfo

router = APIRouter()


def _page_endpoint(info: RouteInfo):
    async def page():
        return {"page": {"section": info.section, "name": info.name, "path": info.href.value}}

    page.__name__ = f"page_{info.href.name.lower()}"
    return page


def _public_endpoint(path: str):
    async def page():
        return {"page": {"section": "Auth", "name": path.strip("/"), "path": path}}

    page.__name__ = "public_" + path.strip("/").replace("-", "_")
    return page


for _info in ROUTE_CATALOG:
    router.add_api_route(_info.href.value, _page_endpoint(_info), methods=["GET"], tags=["Pages"])

for _path in sorted(PUBLIC_ROUTES):
    router.add_api_route(_path, _public_endpoint(_path), methods=["GET"], tags=["Pages"])
