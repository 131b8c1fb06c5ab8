from .step_10_update_system import UpdateSystemStep
from .step_20_install_runtime import InstallRuntimeStep
from .step_30_add_repository import AddRepositoryStep
from .step_40_install_jenkins import InstallJenkinsStep
from .step_50_write_sysconfig import WriteSysconfigStep
from .step_60_start_service import StartServiceStep
from .step_70_wait_ready import WaitReadyStep
from .step_90_summary import SummaryStep

__all__ = [
    "UpdateSystemStep",
    "InstallRuntimeStep",
    "AddRepositoryStep",
    "InstallJenkinsStep",
    "WriteSysconfigStep",
    "StartServiceStep",
    "WaitReadyStep",
    "SummaryStep",
]
