"""
CLI Utilities

Local environment checks used before a run starts.
"""

import shutil
from typing import List

from appdeploy.constants import REQUIRED_TOOLS


def check_tool(tool_name: str) -> bool:
    """Check if a tool is on PATH."""
    return shutil.which(tool_name) is not None


def missing_tools(tools: List[str] = REQUIRED_TOOLS) -> List[str]:
    """Return the required local tools that are not installed."""
    return [tool for tool in tools if not check_tool(tool)]
