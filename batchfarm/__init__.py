"""batchfarm - batch admission and scheduling for 3D print farms."""

__version__ = "0.1.0"
