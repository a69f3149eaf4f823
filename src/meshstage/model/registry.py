"""
Model Registry
==============
Explicit name -> MeshModel table shared by the loader (single writer) and the
stages that resolve actor model names.

The registry does no locking: loading and rendering code that run
concurrently must synchronise around it themselves.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from meshstage.model.mesh import MeshModel

logger = logging.getLogger(__name__)


class ModelNotFoundError(KeyError):
    """Raised when an actor refers to a model name missing from the registry."""
    def __init__(self, model_name: str) -> None:
        super().__init__(model_name)
        self.model_name = model_name

    def __str__(self) -> str:
        return f"Model '{self.model_name}' is not loaded."


class ModelRegistry:
    def __init__(self, models: Optional[Iterable[MeshModel]] = None) -> None:
        self._models: Dict[str, MeshModel] = {}
        if models is not None:
            self.register_all(models)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.names()})"

    def __contains__(self, name: object) -> bool:
        return name in self._models

    def __len__(self) -> int:
        return len(self._models)

    def __iter__(self) -> Iterator[MeshModel]:
        return iter(self._models.values())

    def names(self) -> List[str]:
        return list(self._models.keys())

    def register(self, model: MeshModel) -> None:
        """Stores `model` under its name. A model with the same name is replaced."""
        if model.name in self._models:
            logger.debug(f"Replacing registered model '{model.name}'.")
        self._models[model.name] = model

    def register_all(self, models: Iterable[MeshModel]) -> None:
        for model in models:
            self.register(model)

    def get(self, name: str, default: Optional[MeshModel] = None) -> Optional[MeshModel]:
        return self._models.get(name, default)

    def resolve(self, name: str, fallback: Optional[MeshModel] = None) -> MeshModel:
        """
        Returns the model registered under `name`.

        Args:
            name: Model name to look up.
            fallback: Returned instead of raising when `name` is missing.

        Raises:
            ModelNotFoundError: If `name` is missing and no fallback was given.
        """
        model = self._models.get(name)
        if model is not None:
            return model
        if fallback is not None:
            logger.debug(f"Model '{name}' not loaded, using fallback '{fallback.name}'.")
            return fallback
        raise ModelNotFoundError(name)
