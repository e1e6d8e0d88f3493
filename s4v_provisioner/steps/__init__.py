from .step_10_preflight import PreflightStep
from .step_20_system_packages import SystemPackagesStep
from .step_30_locate_configs import LocateConfigsStep
from .step_35_install_nginx_config import InstallNginxConfigStep
from .step_40_install_ui import InstallUiStep
from .step_45_install_webrtc import InstallWebrtcStep
from .step_50_cleanup_scratch import CleanupScratchStep
from .step_60_certificate import CertificateStep
from .step_70_camera_service import CameraServiceStep
from .step_80_usb_gadget import UsbGadgetStep
from .step_85_restart_nginx import RestartNginxStep
from .step_90_post_check import PostCheckStep

__all__ = [
    "PreflightStep",
    "SystemPackagesStep",
    "LocateConfigsStep",
    "InstallNginxConfigStep",
    "InstallUiStep",
    "InstallWebrtcStep",
    "CleanupScratchStep",
    "CertificateStep",
    "CameraServiceStep",
    "UsbGadgetStep",
    "RestartNginxStep",
    "PostCheckStep",
]
