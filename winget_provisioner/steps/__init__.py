from .step_10_prepare_staging import PrepareStagingStep
from .step_20_fetch_artifacts import FetchArtifactsStep
from .step_30_expand_archive import ExpandArchiveStep
from .step_40_check_completeness import CheckCompletenessStep
from .step_50_install_runtime_libraries import InstallRuntimeLibrariesStep
from .step_60_install_package_manager import InstallPackageManagerStep
from .step_70_install_secondary_manager import InstallSecondaryManagerStep
from .step_80_verify_package_manager import VerifyPackageManagerStep

__all__ = [
    "PrepareStagingStep",
    "FetchArtifactsStep",
    "ExpandArchiveStep",
    "CheckCompletenessStep",
    "InstallRuntimeLibrariesStep",
    "InstallPackageManagerStep",
    "InstallSecondaryManagerStep",
    "VerifyPackageManagerStep",
]
