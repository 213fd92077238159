"""Entrypoint of uvicorn: `uvicorn framehouse.main:app`"""

from framehouse.app import get_application
from framehouse.dependencies import get_settings

# The tests build their own application from `get_application`, with the test settings
app = get_application(settings=get_settings())
