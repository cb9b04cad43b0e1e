"""Base reporter interface."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kit_uploader.models import UploadResult, UploadStage


class Reporter(ABC):
    """Abstract base class for upload progress reporters."""

    @abstractmethod
    def on_stage_start(self, stage: "UploadStage") -> None:
        """Called when an upload stage starts."""
        pass

    @abstractmethod
    def on_stage_complete(self, stage: "UploadStage") -> None:
        """Called when an upload stage completes successfully."""
        pass

    @abstractmethod
    def on_upload_complete(self, result: "UploadResult") -> None:
        """Called once when the run ends, successfully or not."""
        pass
