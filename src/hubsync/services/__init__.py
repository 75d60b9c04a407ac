from src.hubsync.services.deployment_reconciler import DeploymentReconciler
from src.hubsync.services.hub_link import HubLink
from src.hubsync.services.metrics_collector import InstanceMetricsCollector
from src.hubsync.services.progress import ProgressUpdate, interpolate_progress

__all__ = [
    "DeploymentReconciler",
    "HubLink",
    "InstanceMetricsCollector",
    "ProgressUpdate",
    "interpolate_progress",
]
