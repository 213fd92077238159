import importlib
import logging
from pathlib import Path

from framehouse.types.module import CoreModule, Module

framehouse_error_logger = logging.getLogger("framehouse.error")

package_root = Path(__file__).parent


def discover(pattern: str, attribute: str) -> list:
    """
    Import every `endpoints_*.py` file matching `pattern` and collect the object it exposes as `attribute`
    """
    found = []
    for endpoints_file in sorted(package_root.glob(pattern)):
        relative = endpoints_file.relative_to(package_root).with_suffix("")
        endpoints = importlib.import_module(".".join(("framehouse", *relative.parts)))
        declared = getattr(endpoints, attribute, None)
        if declared is None:
            framehouse_error_logger.error(
                f"{endpoints_file} has no `{attribute}` attribute, its endpoints are not served",
            )
            continue
        found.append(declared)
    return found


module_list: list[Module] = discover("modules/*/endpoints_*.py", "module")
core_module_list: list[CoreModule] = discover("core/*/endpoints_*.py", "core_module")

all_modules: list[CoreModule] = module_list + core_module_list
