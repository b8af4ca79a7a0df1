from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from geotasker.tools import ToolRegistry, build_registry


@lru_cache
def get_registry() -> ToolRegistry:
    return build_registry()


RegistryDep = Annotated[ToolRegistry, Depends(get_registry)]
