"""
Domain models — Pydantic types for the bootstrapper.

All models are re-exported here for convenient access:

    from dotbdb.core.models import PlatformInfo, PackagePlan, RunResult, Settings
"""

from dotbdb.core.models.plan import (
    InstallRoute,
    ManagerName,
    PackagePlan,
    Preflight,
    Prerequisite,
)
from dotbdb.core.models.platform import OSFamily, PlatformInfo
from dotbdb.core.models.result import RunResult
from dotbdb.core.models.settings import Settings

__all__ = [
    # plan.py
    "InstallRoute",
    "ManagerName",
    "PackagePlan",
    "Preflight",
    "Prerequisite",
    # platform.py
    "OSFamily",
    "PlatformInfo",
    # result.py
    "RunResult",
    # settings.py
    "Settings",
]
