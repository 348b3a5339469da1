from .calibration import FairnessCalibrationService

__all__ = ["FairnessCalibrationService"]
