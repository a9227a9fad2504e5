from .step_10_install_packages import InstallPackagesStep
from .step_20_install_external_software import InstallExternalSoftwareStep
from .step_30_install_themes import InstallThemesStep
from .step_40_build_deskflow import BuildDeskflowStep

__all__ = [
    "InstallPackagesStep",
    "InstallExternalSoftwareStep",
    "InstallThemesStep",
    "BuildDeskflowStep",
]
