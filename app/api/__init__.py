import importlib
import pkgutil

from fastapi import FastAPI


def include_routers(app: FastAPI, package_name: str, package_path) -> list:
    """app.<package_name> 아래 모듈 중 `router`를 가진 것을 모두 등록하고 모듈명을 반환"""
    included = []
    for module_info in sorted(pkgutil.iter_modules(package_path), key=lambda info: info.name):
        module = importlib.import_module(f"app.{package_name}.{module_info.name}")
        router = getattr(module, "router", None)
        if router is not None:
            app.include_router(router)
            included.append(module_info.name)
    return included
