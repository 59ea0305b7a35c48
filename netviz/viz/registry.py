from typing import Any, Dict, Optional, Type

from netviz.viz.base import IChartController


class VisualizationFactory:
    def __init__(self) -> None:
        self._controllers: Dict[str, Type[IChartController]] = {}

    def register(self, key: str, controller: Type[IChartController]) -> None:
        self._controllers[key] = controller

    def get(self, key: str) -> Optional[Type[IChartController]]:
        return self._controllers.get(key)

    def create(self, key: str, records: Any, settings: Any, **kwargs: Any) -> IChartController:
        controller = self.get(key)
        if controller is None:
            raise KeyError(key)
        return controller(records, settings, **kwargs)

    def list_keys(self) -> list[str]:
        return sorted(self._controllers.keys())


factory = VisualizationFactory()
