"""
System Orchestrator
Manage and run the engine's services
"""

from .main import MainOrchestrator, run
from .service_manager import ServiceManager, ServiceStatus, ServiceInfo

__all__ = [
    "MainOrchestrator",
    "run",
    "ServiceManager",
    "ServiceStatus",
    "ServiceInfo",
]
