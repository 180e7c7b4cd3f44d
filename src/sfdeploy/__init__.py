"""
sfdeploy - SmartFoxServer 2X extension hot deploy tool
"""

__version__ = "1.0.0"

from .core import DeploymentPipeline
from .errors import DeployError, ErrorKind

__all__ = ["DeploymentPipeline", "DeployError", "ErrorKind"]
