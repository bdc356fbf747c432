"""Custom exceptions for the vidsplit pipeline"""

from typing import Optional


class VidsplitError(Exception):
    """Base exception for all vidsplit errors"""
    def __init__(self, message: str, module: str = None):
        self.message = message
        self.module = module or "unknown"
        super().__init__(f"[{self.module}] {self.message}")


class ConfigurationError(VidsplitError):
    """Invalid split request: bad segment length, missing asset, empty range"""


class ProbeError(ConfigurationError):
    """Source media could not be probed"""


class DependencyError(VidsplitError):
    """Missing required external tools"""


class EncoderFailure(VidsplitError):
    """External encoder exited with a non-zero status"""
    def __init__(self, message: str, module: str = None,
                 return_code: Optional[int] = None, trace: str = ""):
        super().__init__(f"Encoder failure: {message}", module)
        self.return_code = return_code
        self.trace = trace


class EncoderCancelled(VidsplitError):
    """External encoder was stopped before it finished"""


class FilesystemError(VidsplitError):
    """Output directory could not be created, purged or listed"""


class RunInProgressError(VidsplitError):
    """A split run is in flight or awaiting acknowledgment of its errors"""
