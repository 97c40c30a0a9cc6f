from .backup import BackupHook, ConfigHistoryBackupHook, NullBackupHook
from .config_service import FailoverConfigService, validate_failover_config
from .monitor import HealthMonitor
from .orchestrator import SwitchOrchestrator
from .policy import failover_reasons, should_failover
from .progress import SwitchProgressTracker, switch_progress
from .scorer import ScoreBreakdown, score_breakdown, score_candidate, select_best

__all__ = [
    "BackupHook",
    "ConfigHistoryBackupHook",
    "FailoverConfigService",
    "HealthMonitor",
    "NullBackupHook",
    "ScoreBreakdown",
    "SwitchOrchestrator",
    "SwitchProgressTracker",
    "failover_reasons",
    "score_breakdown",
    "score_candidate",
    "select_best",
    "should_failover",
    "switch_progress",
    "validate_failover_config",
]
