"""BaseService, the foundation for layerctl services.

Every service receives the resolved :class:`LayerctlSettings` at
construction time and reads paths and section config from it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from layerctl.config.settings import LayerctlSettings


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class DoctorService(BaseService):
            def doctor(self) -> ServiceResult:
                scan = scan_scope_directories(self._settings.cwd, ...)
                ...
    """

    def __init__(self, settings: LayerctlSettings) -> None:
        self._settings = settings
