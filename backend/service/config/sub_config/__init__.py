"""
Config sections. Importing this package registers every section.
"""

from service.config.sub_config.general import api_config       # noqa: F401
from service.config.sub_config.general import workflow_config  # noqa: F401
